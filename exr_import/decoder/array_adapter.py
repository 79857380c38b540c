"""
Array Decoder Adapter

Provides the decoder interface over channels that are already in memory,
for example planes produced by a renderer or built in tests.
"""
from typing import Any, Callable, Dict, Mapping, Optional

import numpy as np

from .interface import DecoderInterface, DecodedChannel, DecodedImage
from ..errors import DecodeError
from ..exr_file import PixelType


class ArrayDecoder(DecoderInterface):
    """
    Decoder for a mapping of full channel name -> 2D numpy array.

    Arrays must share one (height, width) shape and use float32, float16
    or uint32 samples. The path given to decode() is only used for logging.
    """

    name = "Array"

    def __init__(
        self,
        channels: Optional[Mapping[str, np.ndarray]] = None,
        config: Optional[Dict[str, Any]] = None,
        logger: Optional[Callable[[str], None]] = None,
    ):
        super().__init__(config=config, logger=logger)
        self._channels = dict(channels or {})

    def add_channel(self, name: str, samples: np.ndarray) -> None:
        self._channels[name] = samples

    def decode(self, path: str = "<memory>") -> DecodedImage:
        if not self._channels:
            raise DecodeError("No channels to decode")

        shapes = {np.shape(samples) for samples in self._channels.values()}
        if len(shapes) != 1:
            raise DecodeError(f"Channels differ in shape: {sorted(shapes)}")
        shape = shapes.pop()
        if len(shape) != 2:
            raise DecodeError(f"Channels must be 2D (height, width), got shape {shape}")
        height, width = shape

        decoded = []
        for name, samples in self._channels.items():
            samples = np.asarray(samples)
            try:
                pixel_type = PixelType.from_dtype(samples.dtype)
            except ValueError as e:
                raise DecodeError(f"Channel '{name}': {e}") from e
            data = np.ascontiguousarray(samples, dtype=pixel_type.dtype).tobytes()
            decoded.append(DecodedChannel(name=name, pixel_type=pixel_type, data=data))

        self._log(f"Decoded {len(decoded)} in-memory channel(s) for {path}: {width}x{height}")
        return DecodedImage(width=width, height=height, channels=decoded)
