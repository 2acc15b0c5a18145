"""Tests for spot models."""

import json

import pytest
from PIL import Image

from textspots.engine.geometry import Point, Rect
from textspots.exceptions import ConfigurationError
from textspots.models.spot import DEFAULT_MASK_OPACITY, SavedSpotSnapshot, Spot, SpotType


@pytest.fixture
def spot():
    return Spot(id=2, rect=Rect(600.0, 0.0, 200.0, 100.0))


class TestSpotType:
    """Test suite for SpotType."""

    def test_coerce(self):
        """Test coercion from strings and the legacy media name."""
        assert SpotType.coerce("text") is SpotType.TEXT
        assert SpotType.coerce(" Mask ") is SpotType.MASK
        assert SpotType.coerce("media") is SpotType.IMAGE
        assert SpotType.coerce(SpotType.EMPTY) is SpotType.EMPTY

    def test_coerce_unknown(self):
        """Test unknown types raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            SpotType.coerce("video")


class TestSpot:
    """Test suite for Spot."""

    def test_new_spot_is_empty(self, spot):
        """Test detected spots start empty."""
        assert spot.is_empty
        assert spot.content is None
        assert spot.opacity == 1.0
        assert spot.center == Point(700.0, 50.0)
        assert spot.area == 20000.0

    def test_set_type_resets_content(self, spot):
        """Test changing type clears content."""
        spot.set_type("text")
        spot.set_content({"text": "Join us"})

        spot.set_type(SpotType.IMAGE)

        assert spot.type is SpotType.IMAGE
        assert spot.content is None

    def test_mask_starts_half_transparent(self, spot):
        """Test mask spots default to half opacity."""
        spot.set_type("mask")

        assert spot.opacity == DEFAULT_MASK_OPACITY

    @pytest.mark.parametrize("value,expected", [(-1, 0.0), (0.25, 0.25), (3, 1.0)])
    def test_set_opacity_clamps(self, spot, value, expected):
        """Test opacity is clamped to [0, 1]."""
        spot.set_opacity(value)

        assert spot.opacity == expected

    def test_clear(self, spot):
        """Test clearing returns the spot to empty."""
        spot.set_type("mask")
        spot.set_content({"shape": "circle"})

        spot.clear()

        assert spot.is_empty
        assert spot.content is None
        assert spot.opacity == 1.0

    def test_contains(self, spot):
        """Test point containment."""
        assert spot.contains(700.0, 50.0)
        assert not spot.contains(10.0, 10.0)

    def test_to_dict_hides_image_handle(self, spot):
        """Test to_dict reports whether an image is loaded instead of the image."""
        spot.set_type("image")
        spot.set_content({"image": Image.new("RGB", (2, 2)), "fit": "cover"})

        data = spot.to_dict()

        assert data["type"] == "image"
        assert data["content"] == {"fit": "cover", "has_image": True}
        json.dumps(data)

    def test_str(self, spot):
        """Test readable description."""
        assert str(spot) == "Spot 2 (empty): 200x100 at (600, 0)"


class TestSavedSpotSnapshot:
    """Test suite for SavedSpotSnapshot."""

    def test_from_spot(self, spot):
        """Test snapshot keeps geometry, type, content, id and opacity."""
        spot.set_type("text")
        spot.set_content({"text": "Join us"})
        spot.set_opacity(0.8)

        saved = SavedSpotSnapshot.from_spot(spot)

        assert saved.rect == spot.rect
        assert saved.type is SpotType.TEXT
        assert saved.content == {"text": "Join us"}
        assert saved.original_id == 2
        assert saved.opacity == 0.8
        assert saved.center == spot.center

    def test_from_empty_spot_rejected(self, spot):
        """Test empty spots are not snapshotted."""
        with pytest.raises(ConfigurationError):
            SavedSpotSnapshot.from_spot(spot)

    def test_content_is_deep_copied(self, spot):
        """Test later edits to the spot do not leak into the snapshot."""
        spot.set_type("text")
        spot.set_content({"runs": [{"text": "a"}]})

        saved = SavedSpotSnapshot.from_spot(spot)
        spot.content["runs"][0]["text"] = "changed"

        assert saved.content == {"runs": [{"text": "a"}]}

    def test_image_serialized_as_data_url(self, spot):
        """Test image handles become data URLs."""
        spot.set_type("image")
        spot.set_content({"image": Image.new("RGB", (3, 3), "blue"), "fit": "cover"})

        saved = SavedSpotSnapshot.from_spot(spot)

        assert "image" not in saved.content
        assert saved.content["image_data_url"].startswith("data:image/png;base64,")
        assert saved.content["fit"] == "cover"

    def test_image_reference_copied(self, spot):
        """Test image references other than decoded images are kept as they are."""
        spot.set_type("image")
        spot.set_content({"image": "assets/photo.png", "scale": 2})

        saved = SavedSpotSnapshot.from_spot(spot)

        assert saved.content == {"image": "assets/photo.png", "scale": 2}
        assert "image_data_url" not in saved.content

    def test_json_roundtrip(self, spot):
        """Test to_dict is JSON-safe and from_dict restores it."""
        spot.set_type("mask")
        spot.set_content({"shape": "circle"})
        saved = SavedSpotSnapshot.from_spot(spot)

        restored = SavedSpotSnapshot.from_dict(json.loads(json.dumps(saved.to_dict())))

        assert restored == saved
