import numpy as np
import pytest

from models.image import RasterImage
from models.session import EditSession


@pytest.fixture
def other_image() -> RasterImage:
    return RasterImage(np.full((3, 3, 4), 9, dtype=np.uint8))


class TestInvariants:
    def test_empty_session(self):
        session = EditSession()
        assert session.original is None
        assert session.derived is None
        assert session.is_modified is False

    def test_derived_requires_original(self, wide_image):
        with pytest.raises(ValueError):
            EditSession(derived=wide_image)

    def test_modified_requires_derived(self, wide_image):
        with pytest.raises(ValueError):
            EditSession(original=wide_image, is_modified=True)


class TestTransitions:
    def test_load(self, wide_image):
        session = EditSession().load(wide_image)
        assert session.original is wide_image
        assert session.derived is None
        assert not session.is_modified

    def test_apply_keeps_original(self, wide_image, other_image):
        session = EditSession().load(wide_image).apply(other_image)
        assert session.original is wide_image
        assert session.derived is other_image
        assert session.is_modified

    def test_apply_without_original(self, other_image):
        with pytest.raises(ValueError):
            EditSession().apply(other_image)

    def test_loading_again_discards_changes(self, wide_image, other_image, square_image):
        session = EditSession().load(wide_image).apply(other_image).load(square_image)
        assert session.original is square_image
        assert session.derived is None
        assert session.is_modified is False

    def test_remove_changes(self, wide_image, other_image):
        session = EditSession().load(wide_image).apply(other_image).remove_changes()
        assert session.original is wide_image
        assert session.derived is None
        assert not session.is_modified

    def test_remove_image(self, wide_image, other_image):
        session = EditSession().load(wide_image).apply(other_image).remove_image()
        assert session == EditSession()

    def test_transitions_do_not_mutate(self, wide_image, other_image):
        loaded = EditSession().load(wide_image)
        loaded.apply(other_image)
        assert loaded.derived is None


class TestActionFlags:
    def test_empty(self):
        session = EditSession()
        assert not session.has_image
        assert not session.can_transform
        assert not session.can_remove_changes
        assert not session.can_export

    def test_loaded(self, wide_image):
        session = EditSession().load(wide_image)
        assert session.has_image
        assert session.can_transform
        assert not session.can_remove_changes
        assert not session.can_export

    def test_modified(self, wide_image, other_image):
        session = EditSession().load(wide_image).apply(other_image)
        assert session.can_remove_changes
        assert session.can_export
