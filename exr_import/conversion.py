"""
Numeric conversion of EXR layers to packed 8-bit pixel buffers

Every sample is scaled linearly: value * 255, clamped to [0, 255] and
rounded. Tone-mapping settings are carried along but not applied.
"""
from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

import numpy as np

from .errors import UnsupportedLayoutError
from .exr_file import Layer
from .layer_type import LayerType, chroma_channel_names
from .logger import app_logger


@dataclass(frozen=True)
class ConversionSettings:
    """Tone-mapping knobs exposed to the user (inert in the linear path)"""
    gamma: float = 2.2
    exposure: float = 0.0      # stops
    knee_low: float = 0.0
    knee_high: float = 5.0
    defog: float = 0.0

    def __post_init__(self):
        if self.gamma <= 0:
            raise ValueError(f"Gamma must be positive: {self.gamma}")
        if self.knee_high < self.knee_low:
            raise ValueError(f"Knee high ({self.knee_high}) below knee low ({self.knee_low})")
        if self.defog < 0:
            raise ValueError(f"Defog must not be negative: {self.defog}")


class LdrPixelFormat(Enum):
    """Pixel formats of converted 8-bit layers"""
    GRAY = ("L", 1)
    GRAYA = ("LA", 2)
    RGB = ("RGB", 3)
    RGBA = ("RGBA", 4)

    @property
    def pil_mode(self) -> str:
        return self.value[0]

    @property
    def channel_count(self) -> int:
        return self.value[1]


class BaseMode(Enum):
    """Base mode of a destination canvas"""
    GRAYSCALE = "grayscale"
    COLOR = "color"


def to_8bit(samples: np.ndarray) -> np.ndarray:
    """Scale samples by 255, clamp to [0, 255] and round to uint8. NaN maps to 0."""
    values = samples.astype(np.float64) * 255.0
    values = np.nan_to_num(values, nan=0.0, posinf=255.0, neginf=0.0)
    return np.clip(values, 0.0, 255.0).round().astype(np.uint8)


def upsample_chroma(plane: np.ndarray) -> np.ndarray:
    """Output pixel (x, y) takes the sample stored at (x // 2, y // 2)"""
    height, width = plane.shape
    rows = np.arange(height) // 2
    cols = np.arange(width) // 2
    return plane[np.ix_(rows, cols)]


def check_clipping(samples: np.ndarray) -> Tuple[int, int]:
    """
    Count samples the 8-bit conversion will clamp.

    Returns:
        Tuple of (clipped_count, total_count); NaN counts as clipped
    """
    values = samples.astype(np.float64)
    clipped = np.count_nonzero(~((values >= 0.0) & (values <= 1.0)))
    return int(clipped), int(values.size)


# Warn when more than this share of a layer's samples is clamped
CLIPPING_WARN_PERCENT = 5.0


def convert_layer(settings: ConversionSettings, layer: Layer, layer_type: LayerType,
                  grayscale_image: bool) -> Tuple[bytes, LdrPixelFormat]:
    """
    Convert one layer to a packed, row-major, interleaved 8-bit buffer.

    Args:
        settings: Conversion settings for the whole run
        layer: Layer to convert
        layer_type: Layout returned by classify(layer)
        grayscale_image: True when the destination canvas is grayscale; Y/YA
            layers then stay single-channel, otherwise they are widened to RGB

    Returns:
        Tuple of (pixel bytes, pixel format)

    Raises:
        UnsupportedLayoutError: For UNDEFINED layers
    """
    planes, pixel_format = _convert_planes(layer, layer_type, grayscale_image)
    _report_clipping(layer)

    pixels = np.stack(planes, axis=-1)
    return pixels.tobytes(), pixel_format


def _convert_planes(layer: Layer, layer_type: LayerType,
                    grayscale_image: bool) -> Tuple[List[np.ndarray], LdrPixelFormat]:
    def plane(name):
        # Names like "L." classify by their sorted characters but leave a role unfilled
        channel = layer.get_channel(name)
        if channel is None:
            raise UnsupportedLayoutError(layer.name, layer.channel_names)
        return to_8bit(channel.samples())

    if layer_type is LayerType.RGB:
        return [plane("R"), plane("G"), plane("B")], LdrPixelFormat.RGB

    if layer_type is LayerType.RGBA:
        return [plane("R"), plane("G"), plane("B"), plane("A")], LdrPixelFormat.RGBA

    if layer_type is LayerType.Y:
        luminance = plane("Y")
        if grayscale_image:
            return [luminance], LdrPixelFormat.GRAY
        return [luminance, luminance, luminance], LdrPixelFormat.RGB

    if layer_type is LayerType.YA:
        luminance = plane("Y")
        alpha = plane("A")
        if grayscale_image:
            return [luminance, alpha], LdrPixelFormat.GRAYA
        return [luminance, luminance, luminance, alpha], LdrPixelFormat.RGBA

    if layer_type in (LayerType.YC, LayerType.YCA):
        chroma_names = chroma_channel_names(layer)
        if chroma_names is None or not layer.find_channel("Y"):
            raise UnsupportedLayoutError(layer.name, layer.channel_names)
        chroma_1 = upsample_chroma(plane(chroma_names[0]))
        chroma_2 = upsample_chroma(plane(chroma_names[1]))
        planes = [chroma_1, plane("Y"), chroma_2]
        if layer_type is LayerType.YCA:
            planes.append(plane("A"))
            return planes, LdrPixelFormat.RGBA
        return planes, LdrPixelFormat.RGB

    raise UnsupportedLayoutError(layer.name, layer.channel_names)


def _report_clipping(layer: Layer) -> None:
    clipped = total = 0
    for channel in layer:
        channel_clipped, channel_total = check_clipping(channel.samples())
        clipped += channel_clipped
        total += channel_total

    if total == 0:
        return
    clipped_percent = clipped / total * 100
    if clipped_percent > CLIPPING_WARN_PERCENT:
        app_logger.warning(
            f"Layer '{layer.name or 'default'}': {clipped_percent:.1f}% of samples "
            f"outside [0, 1] were clamped"
        )
