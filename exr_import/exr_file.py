"""
In-memory model of a decoded OpenEXR file: channels grouped into layers

A File is filled in one sweep by a decoder. Channel names are split at the
last dot into a layer prefix and a short channel name ("AO.G" -> layer
"AO", channel "G"); channels without a prefix go to the default layer "".
"""
from enum import IntEnum
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np

from .errors import DecodeError
from .logger import app_logger


class PixelType(IntEnum):
    """Sample encoding of a channel"""
    FLOAT = 1
    HALF = 2
    UINT = 3

    @property
    def byte_size(self) -> int:
        return 2 if self is PixelType.HALF else 4

    @property
    def dtype(self) -> np.dtype:
        """Little-endian numpy dtype matching the encoding"""
        return np.dtype(_DTYPES[self])

    @classmethod
    def from_dtype(cls, dtype) -> "PixelType":
        """Map a numpy dtype onto an encoding (float32, float16, uint32 only)"""
        dtype = np.dtype(dtype)
        for pixel_type, name in _DTYPES.items():
            expected = np.dtype(name)
            if dtype.kind == expected.kind and dtype.itemsize == expected.itemsize:
                return pixel_type
        raise ValueError(f"Unsupported sample dtype: {dtype}")


_DTYPES = {
    PixelType.FLOAT: '<f4',
    PixelType.HALF: '<f2',
    PixelType.UINT: '<u4',
}


class Channel:
    """
    One named data plane of raw samples.

    Pixel (x, y) starts at byte offset x * x_stride + y * y_stride. The
    buffer is allocated once with exactly y_stride * height bytes.
    """

    def __init__(self, name: str, pixel_type: PixelType, width: int, height: int,
                 data: Optional[bytes] = None):
        if width < 0 or height < 0:
            raise ValueError(f"Invalid channel size: {width}x{height}")

        self._name = name
        self._pixel_type = PixelType(pixel_type)
        self._width = int(width)
        self._height = int(height)
        self._x_stride = self._pixel_type.byte_size
        self._y_stride = self._x_stride * self._width
        self._layer_name: Optional[str] = None

        size = self._y_stride * self._height
        if data is None:
            self._buffer = bytes(size)
        else:
            buffer = bytes(data)
            if len(buffer) != size:
                raise ValueError(
                    f"Channel '{name}': expected {size} bytes "
                    f"({self._width}x{self._height} {self._pixel_type.name}), got {len(buffer)}"
                )
            self._buffer = buffer

    @property
    def name(self) -> str:
        return self._name

    @property
    def pixel_type(self) -> PixelType:
        return self._pixel_type

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def x_stride(self) -> int:
        """Size of a single sample in bytes"""
        return self._x_stride

    @property
    def y_stride(self) -> int:
        return self._y_stride

    @property
    def byte_size(self) -> int:
        return self._y_stride * self._height

    @property
    def pixel_count(self) -> int:
        return self._width * self._height

    @property
    def layer_name(self) -> Optional[str]:
        """Name of the owning layer, None until the channel is inserted"""
        return self._layer_name

    @property
    def data(self) -> bytes:
        return self._buffer

    def samples(self) -> np.ndarray:
        """Read-only (height, width) view of the samples in their own encoding"""
        return np.frombuffer(self._buffer, dtype=self._pixel_type.dtype).reshape(
            (self._height, self._width))

    def __repr__(self) -> str:
        return f"Channel({self._name!r}, {self._pixel_type.name}, {self._width}x{self._height})"


class Layer:
    """Ordered, name-indexed group of channels forming one sub-image"""

    def __init__(self, name: str):
        self._name = name
        self._index: Dict[str, int] = {}
        self._channels: List[Channel] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def channel_count(self) -> int:
        return len(self._channels)

    @property
    def channels(self) -> Tuple[Channel, ...]:
        return tuple(self._channels)

    @property
    def channel_names(self) -> List[str]:
        return [channel.name for channel in self._channels]

    def get_channel(self, name: str) -> Optional[Channel]:
        index = self._index.get(name)
        if index is None:
            return None
        return self._channels[index]

    def get_channel_at(self, index: int) -> Optional[Channel]:
        if 0 <= index < len(self._channels):
            return self._channels[index]
        return None

    def find_channel(self, name: str) -> bool:
        return name in self._index

    def insert_channel(self, channel: Channel) -> None:
        """Take ownership of a channel; names must be unique in a layer"""
        if channel.layer_name is not None:
            raise ValueError(
                f"Channel '{channel.name}' already belongs to layer '{channel.layer_name}'")
        if channel.name in self._index:
            raise ValueError(f"Duplicate channel '{channel.name}' in layer '{self._name}'")

        self._index[channel.name] = len(self._channels)
        self._channels.append(channel)
        channel._layer_name = self._name

    def __len__(self) -> int:
        return len(self._channels)

    def __iter__(self) -> Iterator[Channel]:
        return iter(self._channels)

    def __repr__(self) -> str:
        return f"Layer({self._name!r}, {self.channel_names})"


def split_full_channel_name(full_name: str) -> Tuple[str, str]:
    """
    Split a full channel name into (layer name, channel name).

    The layer is everything before the last dot; names without a dot belong
    to the default layer "".
    """
    layer_name, dot, channel_name = full_name.rpartition('.')
    if not dot:
        return "", full_name
    return layer_name, channel_name


class File:
    """
    Wraps the data of one OpenEXR file. Once loaded, all the data is in memory.

    Loading is all or nothing: on failure the file stays unloaded, keeps no
    layers and load_error holds the reason.
    """

    def __init__(self, path: str, decoder=None):
        """
        Args:
            path: Source path or identifier handed to the decoder
            decoder: DecoderInterface instance (default: OpenEXR decoder)
        """
        self._path = str(path)
        self._decoder = decoder
        self._loaded = False
        self._width = 0
        self._height = 0
        self._index: Dict[str, int] = {}
        self._layers: List[Layer] = []
        self.load_error: Optional[str] = None

    def load(self) -> bool:
        """
        Decode the file and group its channels into layers.

        Returns:
            True on success, False on failure (see load_error)
        """
        if self._loaded:
            return True

        decoder = self._decoder
        if decoder is None:
            from .decoder import create_decoder
            decoder = create_decoder('openexr')

        try:
            decoded = decoder.decode(self._path)
            layers = self._group_channels(decoded)
        except (DecodeError, ValueError) as e:
            self.load_error = str(e)
            app_logger.error(f"Failed to load {self._path}: {e}")
            return False

        self._width = decoded.width
        self._height = decoded.height
        self._layers = layers
        self._index = {layer.name: i for i, layer in enumerate(layers)}
        self._loaded = True
        self.load_error = None

        app_logger.info(
            f"Loaded {self._path}: {self._width}x{self._height}, "
            f"{len(decoded.channels)} channel(s) in {len(layers)} layer(s)"
        )
        return True

    @staticmethod
    def _group_channels(decoded) -> List[Layer]:
        """Build layers from a DecodedImage: named layers sorted, default layer last"""
        grouped: Dict[str, Layer] = {}
        default_layer = None

        for decoded_channel in decoded.channels:
            layer_name, channel_name = split_full_channel_name(decoded_channel.name)
            channel = Channel(channel_name, decoded_channel.pixel_type,
                              decoded.width, decoded.height, decoded_channel.data)

            if layer_name:
                layer = grouped.get(layer_name)
                if layer is None:
                    layer = grouped[layer_name] = Layer(layer_name)
            else:
                if default_layer is None:
                    default_layer = Layer("")
                layer = default_layer

            layer.insert_channel(channel)

        layers = [grouped[name] for name in sorted(grouped)]
        if default_layer is not None:
            layers.append(default_layer)
        return layers

    def is_loaded(self) -> bool:
        return self._loaded

    def get_path(self) -> str:
        return self._path

    def get_width(self) -> int:
        return self._width

    def get_height(self) -> int:
        return self._height

    def get_layer_count(self) -> int:
        return len(self._layers)

    @property
    def layers(self) -> Tuple[Layer, ...]:
        return tuple(self._layers)

    def find_layer(self, name: str) -> Optional[Layer]:
        index = self._index.get(name)
        if index is None:
            return None
        return self._layers[index]

    def get_layer_at(self, index: int) -> Optional[Layer]:
        if 0 <= index < len(self._layers):
            return self._layers[index]
        return None

    def find_channel(self, full_name: str) -> Optional[Channel]:
        """Look up a channel by its full dotted name"""
        layer_name, channel_name = split_full_channel_name(full_name)
        layer = self.find_layer(layer_name)
        if layer is None:
            return None
        return layer.get_channel(channel_name)

    def has_channel(self, full_name: str) -> bool:
        return self.find_channel(full_name) is not None
