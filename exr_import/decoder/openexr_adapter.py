"""
OpenEXR Decoder Adapter

Reads every channel of a scanline OpenEXR file through the OpenEXR/Imath
Python bindings, keeping each channel in its stored pixel type.
"""
import os

import numpy as np

from .interface import DecoderInterface, DecodedChannel, DecodedImage
from ..errors import DecodeError
from ..exr_file import PixelType

try:
    import OpenEXR
    import Imath
    OPENEXR_AVAILABLE = True
except ImportError:
    OPENEXR_AVAILABLE = False


def _to_pixel_type(imath_pixel_type) -> PixelType:
    """Map an Imath.PixelType onto our encoding"""
    value = imath_pixel_type.v
    if value == Imath.PixelType.UINT:
        return PixelType.UINT
    if value == Imath.PixelType.HALF:
        return PixelType.HALF
    if value == Imath.PixelType.FLOAT:
        return PixelType.FLOAT
    raise DecodeError(f"Unknown OpenEXR pixel type: {imath_pixel_type}")


def expand_subsampled(samples: np.ndarray, width: int, height: int) -> np.ndarray:
    """
    Place a subsampled plane into the top-left block of a full-size plane.

    This is the layout OpenEXR produces when a subsampled channel is read
    into a full-resolution slice: the sample for pixel (x, y) lives at
    (x // x_sampling, y // y_sampling).
    """
    full = np.zeros((height, width), dtype=samples.dtype)
    sub_height, sub_width = samples.shape
    full[:sub_height, :sub_width] = samples
    return full


class OpenExrDecoder(DecoderInterface):
    """Decoder backed by the OpenEXR Python bindings"""

    name = "OpenEXR"

    def can_decode(self, path: str) -> bool:
        if not OPENEXR_AVAILABLE or not os.path.isfile(path):
            return False
        return bool(OpenEXR.isOpenExrFile(path))

    def decode(self, path: str) -> DecodedImage:
        if not OPENEXR_AVAILABLE:
            raise DecodeError("OpenEXR bindings not installed (pip install OpenEXR)")
        if not os.path.isfile(path):
            raise DecodeError(f"File not found: {path}")
        if not OpenEXR.isOpenExrFile(path):
            raise DecodeError("file is not a valid OpenEXR file")

        try:
            exr_file = OpenEXR.InputFile(path)
        except (OSError, IOError) as e:
            raise DecodeError(f"Could not open {path}: {e}") from e

        try:
            header = exr_file.header()
            data_window = header['dataWindow']
            width = data_window.max.x - data_window.min.x + 1
            height = data_window.max.y - data_window.min.y + 1
            self._log(f"Decoding {os.path.basename(path)}: {width}x{height}")

            channels = []
            for name, info in header['channels'].items():
                pixel_type = _to_pixel_type(info.type)
                raw = exr_file.channel(name, info.type)
                data = self._full_resolution(
                    name, raw, pixel_type, width, height,
                    info.xSampling, info.ySampling)
                channels.append(DecodedChannel(
                    name=name,
                    pixel_type=pixel_type,
                    data=data,
                    x_sampling=info.xSampling,
                    y_sampling=info.ySampling,
                ))
        except DecodeError:
            raise
        except Exception as e:
            raise DecodeError(f"Failed to read {path}: {e}") from e
        finally:
            exr_file.close()

        return DecodedImage(width=width, height=height, channels=channels)

    @staticmethod
    def _full_resolution(name, raw, pixel_type, width, height, x_sampling, y_sampling) -> bytes:
        """Return the channel as width * height samples"""
        samples = np.frombuffer(raw, dtype=pixel_type.dtype)
        if samples.size == width * height:
            return samples.tobytes()

        sub_width = -(-width // x_sampling)
        sub_height = -(-height // y_sampling)
        if samples.size != sub_width * sub_height:
            raise DecodeError(
                f"Channel '{name}': {samples.size} samples, expected "
                f"{width * height} or {sub_width * sub_height}"
            )
        plane = expand_subsampled(samples.reshape((sub_height, sub_width)), width, height)
        return plane.tobytes()
