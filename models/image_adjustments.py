from __future__ import annotations
from dataclasses import dataclass


CONTRAST_LIMIT = 259


@dataclass(frozen=True)
class PointAdjustments:
    """
    Value-object holding the fixed point-filter strengths
    (brightness offset and contrast amount, both in 8-bit channel units).
    """
    brightness: int = 40     # added to R, G and B
    contrast:   int = 30     # open interval (-259, 259)

    def __post_init__(self):
        if not -CONTRAST_LIMIT < self.contrast < CONTRAST_LIMIT:
            raise ValueError(
                f"contrast must lie in ({-CONTRAST_LIMIT}, {CONTRAST_LIMIT}), got {self.contrast}"
            )

    @property
    def contrast_factor(self) -> float:
        return contrast_factor(self.contrast)


def contrast_factor(amount: float) -> float:
    """
    Classic 8-bit contrast correction factor.
    amount == 0 gives exactly 1.0.
    """
    if not -CONTRAST_LIMIT < amount < CONTRAST_LIMIT:
        raise ValueError(f"contrast amount must lie in ({-CONTRAST_LIMIT}, {CONTRAST_LIMIT}), got {amount}")
    return (CONTRAST_LIMIT * (amount + 255)) / (255 * (CONTRAST_LIMIT - amount))
