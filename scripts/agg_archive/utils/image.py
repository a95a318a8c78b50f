"""
Image decoding utilities for override sprite synthesis.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Union
from PIL import Image, UnidentifiedImageError
import numpy as np
import io

from ..errors import ImageDecodeError


MAX_DIMENSION = 0xFFFF

# Pillow reports broken or hostile files through several unrelated types.
DECODE_ERRORS = (UnidentifiedImageError, Image.DecompressionBombError, SyntaxError, OSError, ValueError)


@dataclass(frozen=True)
class DecodedImage:
    """Raw RGBA pixels of one decoded image, row-major, 4 bytes per pixel."""
    width: int
    height: int
    rgba: bytes

    @property
    def pixel_size(self) -> int:
        """Get size of the pixel payload in bytes."""
        return self.width * self.height * 4


class ImageUtils:
    """Utility class for image decoding operations."""

    @staticmethod
    def load_image(data: Union[bytes, str, Path, Image.Image]) -> Image.Image:
        """
        Load image from various sources.

        Args:
            data: Image data as bytes, file path, or PIL Image

        Returns:
            PIL Image object with its pixel data loaded

        Raises:
            ImageDecodeError: If data cannot be loaded as image
        """
        if isinstance(data, Image.Image):
            return data
        elif isinstance(data, bytes):
            try:
                image = Image.open(io.BytesIO(data))
                image.load()
                return image
            except DECODE_ERRORS as e:
                raise ImageDecodeError(f"Cannot load image from bytes: {e}")
        elif isinstance(data, (str, Path)):
            try:
                with Image.open(data) as image:
                    image.load()
                    return image.copy()
            except DECODE_ERRORS as e:
                raise ImageDecodeError(f"Cannot load image from path '{data}': {e}", path=str(data))
        else:
            raise ImageDecodeError(f"Unsupported image data type: {type(data)}")

    @staticmethod
    def ensure_rgba(image: Image.Image) -> Image.Image:
        """Convert image to RGBA mode if not already."""
        if image.mode != 'RGBA':
            return image.convert('RGBA')
        return image

    @staticmethod
    def load_rgba(data: Union[bytes, str, Path, Image.Image]) -> DecodedImage:
        """
        Decode an image into width, height and an RGBA byte buffer.

        Raises:
            ImageDecodeError: If the image cannot be decoded or its dimensions
                do not fit in 16 bits
        """
        image = ImageUtils.ensure_rgba(ImageUtils.load_image(data))
        width, height = image.size

        if width > MAX_DIMENSION or height > MAX_DIMENSION:
            raise ImageDecodeError(
                f"Image size {width}x{height} exceeds maximum {MAX_DIMENSION}x{MAX_DIMENSION}"
            )

        return DecodedImage(width=width, height=height, rgba=image.tobytes())

    @staticmethod
    def from_rgba_array(pixels: np.ndarray) -> Image.Image:
        """Create a PIL RGBA image from an (height, width, 4) uint8 array."""
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ImageDecodeError(f"Expected (height, width, 4) array, got shape {pixels.shape}")
        return Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8))
