"""Image serialization for spot snapshots."""

from .image_codec import decode_image, encode_image

__all__ = ["encode_image", "decode_image"]
