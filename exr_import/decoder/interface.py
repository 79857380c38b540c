"""
Decoder Interface

Defines the abstract base class and data structures for decoder backends.
A decoder turns a source (file path or in-memory data) into a flat list of
named channels plus the image's pixel dimensions.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Dict, Any

from ..exr_file import PixelType
from ..logger import app_logger


@dataclass(frozen=True)
class DecodedChannel:
    """One decoded channel at full image resolution"""
    name: str                      # Full name, e.g. "AO.G" or "R"
    pixel_type: PixelType
    data: bytes                    # width * height samples, little-endian, row-major
    x_sampling: int = 1            # Source subsampling (2 for 4:2:0 chroma)
    y_sampling: int = 1


@dataclass
class DecodedImage:
    """Everything a File needs from the decoder"""
    width: int
    height: int
    channels: List[DecodedChannel] = field(default_factory=list)

    @property
    def channel_names(self) -> List[str]:
        return [channel.name for channel in self.channels]


class DecoderInterface(ABC):
    """
    Abstract base class for decoder backends.

    Lifecycle:
        1. __init__(config, logger) - create instance
        2. decode(path) - return a DecodedImage or raise DecodeError
    """

    name = "decoder"

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        logger: Optional[Callable[[str], None]] = None,
    ):
        self._config = config or {}
        self._logger = logger

    def _log(self, message: str) -> None:
        """Log message via callback"""
        if self._logger:
            self._logger(message)
        else:
            app_logger.debug(f"[{self.name}] {message}")

    @abstractmethod
    def decode(self, path: str) -> DecodedImage:
        """
        Decode a source into channels.

        Args:
            path: Source path or identifier

        Returns:
            DecodedImage with full-resolution channel data

        Raises:
            DecodeError: If the source cannot be decoded
        """
        pass

    def can_decode(self, path: str) -> bool:
        """Quick check whether this backend understands the source"""
        return True
