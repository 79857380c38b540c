"""
Classification of a layer's channel set into a known pixel layout
"""
from enum import Enum
from typing import Dict, Optional, Tuple

from .exr_file import Layer


class LayerType(Enum):
    """Pixel layouts a layer can be converted from"""
    UNDEFINED = "undefined"
    Y = "Y"          # grayscale
    YA = "YA"        # grayscale + alpha
    YC = "YC"        # luminance + chroma
    YCA = "YCA"      # luminance + chroma + alpha
    RGB = "RGB"
    RGBA = "RGBA"

    @property
    def is_grayscale(self) -> bool:
        return self in (LayerType.Y, LayerType.YA)

    @property
    def has_alpha(self) -> bool:
        return self in (LayerType.YA, LayerType.YCA, LayerType.RGBA)


# No recognized layout has more planes than this
MAX_CHANNELS = 4

# (channel count, sorted characters of all names) -> layout
_LAYOUTS: Dict[Tuple[int, str], LayerType] = {
    (1, "Y"): LayerType.Y,
    (2, "AY"): LayerType.YA,
    (3, "BRYYY"): LayerType.YC,     # Y, RY, BY
    (3, "BRY"): LayerType.YC,       # Y, R, B
    (4, "ABRYYY"): LayerType.YCA,
    (4, "ABRY"): LayerType.YCA,
    (3, "BGR"): LayerType.RGB,
    (4, "ABGR"): LayerType.RGBA,
}

# Chroma planes in output order: (chroma 1, chroma 2)
_CHROMA_NAMES = (("RY", "BY"), ("R", "B"))


def sorted_name_key(layer: Layer) -> str:
    """All channel names concatenated with their characters sorted"""
    return "".join(sorted("".join(layer.channel_names)))


def classify(layer: Layer) -> LayerType:
    """
    Return the layout of a layer, independent of channel order.

    Layers with no channels, more than four channels or an unknown set of
    names are UNDEFINED.
    """
    count = layer.channel_count
    if count == 0 or count > MAX_CHANNELS:
        return LayerType.UNDEFINED
    return _LAYOUTS.get((count, sorted_name_key(layer)), LayerType.UNDEFINED)


def chroma_channel_names(layer: Layer) -> Optional[Tuple[str, str]]:
    """Names of the (chroma 1, chroma 2) planes of a YC/YCA layer"""
    for first, second in _CHROMA_NAMES:
        if layer.find_channel(first) and layer.find_channel(second):
            return first, second
    return None
