"""
Image decoding and encoding for Wrap Studio.

The raster core consumes exactly two collaborators: a decoder turning a
path, byte string, file object or PIL Image into pixels, and a PNG encoder.
Both live here so the rest of the package never touches the filesystem.

Functions:
    load_image: Decode an image source into a PIL Image
    encode_png: Encode a PIL Image as PNG bytes
    decode_png: Decode PNG (or any supported) bytes into a PIL Image
    get_supported_image_formats: List supported file extensions
    is_supported_format: Check a path's extension
"""

import io
import logging
from pathlib import Path
from typing import Any, List, Optional, Union

from PIL import Image, UnidentifiedImageError

from WS_Libs.constants import DEFAULT_OUTPUT_FORMAT, SUPPORTED_STANDARD_IMAGES
from WS_Libs.errors import DecodeError

logger = logging.getLogger(__name__)

ImageSource = Union[str, Path, bytes, bytearray, Any]


def get_supported_image_formats() -> List[str]:
    """
    Get list of supported standard image formats.

    Returns:
        Sorted list of file extensions (e.g., ['.bmp', '.gif', ...])
    """
    return sorted(SUPPORTED_STANDARD_IMAGES)


def is_supported_format(file_path: Union[str, Path]) -> bool:
    """
    Check if a file path has a supported image extension.

    Args:
        file_path: Path to check

    Returns:
        True if the extension (case-insensitive) is supported
    """
    return Path(file_path).suffix.lower() in SUPPORTED_STANDARD_IMAGES


def load_image(source: ImageSource, mode: Optional[str] = None) -> 'Image.Image':
    """
    Decode an image source into a fully loaded PIL Image.

    Args:
        source: File path, raw bytes, binary file object, or PIL Image
        mode: Optional mode to convert to (e.g., "RGB", "RGBA")

    Returns:
        A PIL Image detached from the underlying file

    Raises:
        DecodeError: If the file is missing, unsupported, or cannot be decoded
    """
    if isinstance(source, Image.Image):
        image = source.copy()
    elif isinstance(source, (bytes, bytearray)):
        image = _open_and_load(io.BytesIO(bytes(source)), "<bytes>")
    elif isinstance(source, (str, Path)):
        path = Path(source)
        if not path.exists():
            raise DecodeError(f"Image file not found: {path}")
        if not path.is_file():
            raise DecodeError(f"Image path is not a file: {path}")
        if not is_supported_format(path):
            raise DecodeError(
                f"Unsupported image format: {path.suffix}. "
                f"Supported formats: {', '.join(get_supported_image_formats())}"
            )
        image = _open_and_load(path, str(path))
    elif hasattr(source, "read"):
        image = _open_and_load(source, getattr(source, "name", "<stream>"))
    else:
        raise TypeError(f"Unsupported image source type: {type(source)}")

    if mode is not None and image.mode != mode:
        image = image.convert(mode)
    return image


def _open_and_load(fp: Any, label: str) -> 'Image.Image':
    try:
        with Image.open(fp) as opened:
            opened.load()
            image = opened.copy()
    except UnidentifiedImageError as e:
        raise DecodeError(f"Cannot identify image data in {label}") from e
    except (OSError, ValueError) as e:
        raise DecodeError(f"Failed to decode image {label}: {e}") from e

    logger.debug(f"Decoded {label}: {image.size[0]}x{image.size[1]} {image.mode}")
    return image


def encode_png(image: 'Image.Image') -> bytes:
    """
    Encode an image as PNG bytes.

    Args:
        image: PIL Image to encode

    Returns:
        PNG-encoded bytes
    """
    if not hasattr(image, "save"):
        raise TypeError(f"Expected PIL Image, got {type(image)}")

    buffer = io.BytesIO()
    image.save(buffer, format=DEFAULT_OUTPUT_FORMAT)
    return buffer.getvalue()


def decode_png(data: bytes) -> 'Image.Image':
    """Decode encoded image bytes (typically PNG) into a PIL Image."""
    return load_image(data)
