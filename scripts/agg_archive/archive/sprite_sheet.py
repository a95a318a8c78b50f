"""
ICN sprite-sheet container: synthesis from image folders and parsing.

Layout (little-endian)::

    [slot_count: u16][total_size: u32]
    slot_count times:
        [offset_x: u16][offset_y: u16][width: u16][height: u16]
        [animation_frames: u8][data_offset: u32]
        [width * height * 4 bytes of RGBA pixels]

``data_offset`` is measured from the end of the 6-byte container header and
points at the slot's pixel data. ``total_size`` counts everything after the
container header.
"""

import logging
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple, Union

import numpy as np
from PIL import Image

from ..errors import ImageDecodeError, SpriteSheetError
from ..utils.fs import list_files_with_extensions
from ..utils.image import DecodedImage, ImageUtils

logger = logging.getLogger(__name__)

CONTAINER_HEADER = struct.Struct("<HI")
SLOT_HEADER = struct.Struct("<HHHHBI")
CONTAINER_HEADER_SIZE = CONTAINER_HEADER.size
SLOT_HEADER_SIZE = SLOT_HEADER.size
MAX_SLOTS = 0xFFFF


@dataclass(frozen=True)
class SlotHeader:
    """Metadata header of one sprite slot."""
    offset_x: int
    offset_y: int
    width: int
    height: int
    animation_frames: int
    data_offset: int

    @property
    def pixel_size(self) -> int:
        return self.width * self.height * 4

    def pack(self) -> bytes:
        return SLOT_HEADER.pack(
            self.offset_x, self.offset_y, self.width, self.height,
            self.animation_frames, self.data_offset
        )

    @classmethod
    def unpack(cls, data: bytes, position: int = 0) -> "SlotHeader":
        return cls(*SLOT_HEADER.unpack_from(data, position))


def build_slot(image: DecodedImage, current_offset: int) -> Tuple[bytes, int]:
    """
    Serialize one image as a slot.

    Args:
        image: Decoded RGBA image
        current_offset: Bytes already emitted after the container header

    Returns:
        Tuple of (slot header + pixels, offset after this slot)
    """
    # Offsets and animation frame count have no source yet; always zero.
    header = SlotHeader(
        offset_x=0,
        offset_y=0,
        width=image.width,
        height=image.height,
        animation_frames=0,
        data_offset=current_offset + SLOT_HEADER_SIZE,
    )
    chunk = header.pack() + image.rgba
    return chunk, current_offset + len(chunk)


def build_sprite_sheet(images: Iterable[DecodedImage]) -> bytes:
    """
    Assemble a complete container from decoded images, in order.

    Raises:
        SpriteSheetError: If there are more images than a container can hold
            or the payload exceeds 32 bits
    """
    slots = []
    current_offset = 0
    for image in images:
        chunk, current_offset = build_slot(image, current_offset)
        slots.append(chunk)

    if len(slots) > MAX_SLOTS:
        raise SpriteSheetError(f"Too many slots: {len(slots)} (maximum {MAX_SLOTS})")
    if current_offset > 0xFFFFFFFF:
        raise SpriteSheetError(f"Sprite sheet payload of {current_offset} bytes exceeds 4 GiB")

    return CONTAINER_HEADER.pack(len(slots), current_offset) + b"".join(slots)


class SpriteSheetSynthesizer:
    """Builds ICN containers from directories of images."""

    def __init__(self, image_extensions: Sequence[str] = (".png",)):
        self.image_extensions = list(image_extensions)

    def find_images(self, directory: Union[str, Path]) -> List[Path]:
        """List source images directly inside ``directory``."""
        return list_files_with_extensions(directory, self.image_extensions)

    def synthesize(self, directory: Union[str, Path]) -> bytes:
        """
        Build a container from every image in ``directory``.

        Returns:
            Container bytes, or empty bytes when the directory holds no images
            or any image fails to decode
        """
        directory = Path(directory)
        image_paths = self.find_images(directory)
        if not image_paths:
            logger.debug(f"No images found in {directory}")
            return b""

        try:
            images = [ImageUtils.load_rgba(path) for path in image_paths]
            data = build_sprite_sheet(images)
        except (ImageDecodeError, SpriteSheetError) as e:
            logger.warning(f"Cannot build sprite sheet from {directory}: {e}")
            return b""

        logger.debug(f"Built sprite sheet from {len(images)} images in {directory} ({len(data)} bytes)")
        return data


@dataclass
class SpriteSheet:
    """Parsed ICN container."""
    slot_count: int
    total_size: int
    slots: List[SlotHeader]
    payload: bytes

    def slot_bytes(self, index: int) -> bytes:
        """Get raw RGBA bytes of one slot."""
        slot = self.slots[index]
        return self.payload[slot.data_offset:slot.data_offset + slot.pixel_size]

    def slot_pixels(self, index: int) -> np.ndarray:
        """Get pixels of one slot as a (height, width, 4) uint8 array."""
        slot = self.slots[index]
        pixels = np.frombuffer(self.slot_bytes(index), dtype=np.uint8)
        return pixels.reshape((slot.height, slot.width, 4))

    def slot_image(self, index: int) -> Image.Image:
        """Get one slot as a PIL RGBA image."""
        return ImageUtils.from_rgba_array(self.slot_pixels(index))


def parse_sprite_sheet(data: bytes) -> SpriteSheet:
    """
    Parse an ICN container produced by build_sprite_sheet.

    Each slot header is read at the position following the previous slot's
    pixels and every data offset is checked against the payload bounds.

    Raises:
        SpriteSheetError: If the container is truncated or offsets are out of range
    """
    if len(data) < CONTAINER_HEADER_SIZE:
        raise SpriteSheetError(f"Sprite sheet too small: {len(data)} bytes")

    slot_count, total_size = CONTAINER_HEADER.unpack_from(data, 0)
    payload = data[CONTAINER_HEADER_SIZE:]
    if total_size > len(payload):
        raise SpriteSheetError(
            f"Declared payload size {total_size} exceeds available {len(payload)} bytes"
        )
    payload = payload[:total_size]

    slots = []
    position = 0
    for index in range(slot_count):
        if position + SLOT_HEADER_SIZE > total_size:
            raise SpriteSheetError(f"Slot {index} header lies outside the payload")
        slot = SlotHeader.unpack(payload, position)
        if slot.data_offset + slot.pixel_size > total_size:
            raise SpriteSheetError(
                f"Slot {index} pixels at {slot.data_offset}+{slot.pixel_size} exceed payload of {total_size} bytes"
            )
        slots.append(slot)
        position = slot.data_offset + slot.pixel_size

    return SpriteSheet(slot_count=slot_count, total_size=total_size, slots=slots, payload=payload)
