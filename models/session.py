from __future__ import annotations
from dataclasses import dataclass

from models.image import RasterImage


@dataclass(frozen=True)
class EditSession:
    """
    Linear edit history: one original image and at most one derived image.
    Every transition returns a new session; invariants are checked on construction.
    """
    original: RasterImage | None = None
    derived: RasterImage | None = None   # Result of the last applied operation.
    is_modified: bool = False            # True while `derived` holds unsaved edits.

    def __post_init__(self):
        if self.derived is not None and self.original is None:
            raise ValueError("A derived image requires an original image")
        if self.is_modified and self.derived is None:
            raise ValueError("A modified session requires a derived image")

    # ── Transitions ──────────────────────────────────────────────────
    def load(self, image: RasterImage) -> EditSession:
        """Replace the original and drop any derived result."""
        return EditSession(original=image)

    def apply(self, result: RasterImage) -> EditSession:
        """Record *result* as the derived image of the current original."""
        if self.original is None:
            raise ValueError("Cannot apply an operation without an original image")
        return EditSession(original=self.original, derived=result, is_modified=True)

    def remove_changes(self) -> EditSession:
        return EditSession(original=self.original)

    def remove_image(self) -> EditSession:
        return EditSession()

    # ── Action availability ──────────────────────────────────────────
    @property
    def has_image(self) -> bool:
        return self.original is not None

    @property
    def can_transform(self) -> bool:
        return self.has_image

    @property
    def can_remove_changes(self) -> bool:
        return self.derived is not None

    @property
    def can_export(self) -> bool:
        return self.derived is not None and self.is_modified
