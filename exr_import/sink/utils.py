"""
Shared helpers for sink backends
"""
import os
import re
import tempfile

from PIL import Image

from ..conversion import BaseMode, LdrPixelFormat
from ..errors import LayerAppendError


# Pixel formats a grayscale canvas can hold
GRAYSCALE_FORMATS = (LdrPixelFormat.GRAY, LdrPixelFormat.GRAYA)

# Name used on disk for the unprefixed layer
DEFAULT_LAYER_FILENAME = "default"


def image_from_buffer(width: int, height: int, mode: BaseMode,
                      pixel_format: LdrPixelFormat, data: bytes) -> Image.Image:
    """
    Wrap a packed 8-bit buffer in a PIL image.

    Raises:
        LayerAppendError: If the format does not fit the canvas mode or the
            buffer size does not match width * height * channels
    """
    is_gray_format = pixel_format in GRAYSCALE_FORMATS
    if (mode is BaseMode.GRAYSCALE) != is_gray_format:
        raise LayerAppendError(
            f"failed to create layer: {pixel_format.name} layer on a {mode.value} canvas")

    expected = width * height * pixel_format.channel_count
    if len(data) != expected:
        raise LayerAppendError(
            f"failed to create layer: expected {expected} bytes, got {len(data)}")

    return Image.frombytes(pixel_format.pil_mode, (width, height), bytes(data))


def safe_layer_filename(name: str) -> str:
    """Turn a layer name into a file-system friendly stem"""
    if not name:
        return DEFAULT_LAYER_FILENAME
    return re.sub(r'[^A-Za-z0-9._-]+', '_', name)


def save_image_atomic(img, output_path: str, format_name: str, **save_kwargs) -> None:
    """
    Save image atomically to prevent corruption on crash/power loss.
    Uses temp file + rename pattern for atomic writes.

    Args:
        img: PIL Image to save
        output_path: Final destination path
        format_name: Image format (PNG, TIFF, etc.)
        **save_kwargs: Additional arguments for PIL save()
    """
    output_dir = os.path.dirname(output_path)

    if output_dir and not os.path.exists(output_dir):
        os.makedirs(output_dir, exist_ok=True)

    # Create temp file in same directory for atomic rename
    fd, temp_path = tempfile.mkstemp(
        suffix='.tmp',
        dir=output_dir if output_dir else '.',
        prefix='.saving_'
    )

    try:
        os.close(fd)  # PIL reopens the path

        img.save(temp_path, format_name, **save_kwargs)

        # Atomic rename (os.replace is atomic on same filesystem)
        os.replace(temp_path, output_path)

    except Exception:
        try:
            if os.path.exists(temp_path):
                os.remove(temp_path)
        except OSError:
            pass  # Best effort cleanup
        raise
