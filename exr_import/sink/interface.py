"""
Canvas Sink Interface

Defines the abstract base class and data structures for destination
backends. A sink receives finished 8-bit layers: it creates a canvas of a
given base mode and size, then appends layers to it in call order.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List, Callable

from PIL import Image

from ..conversion import BaseMode, LdrPixelFormat
from ..errors import CanvasCreationError
from ..logger import app_logger
from .utils import image_from_buffer


@dataclass(frozen=True)
class SinkCapabilities:
    """Describes what a sink backend does with the layers it receives"""
    backend_name: str                        # "Memory", "Directory"
    persists_output: bool = False            # Writes layers somewhere durable
    supports_delete: bool = True             # delete_canvas() removes appended layers
    output_formats: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert capabilities to dictionary for serialization"""
        return {
            'backend_name': self.backend_name,
            'persists_output': self.persists_output,
            'supports_delete': self.supports_delete,
            'output_formats': list(self.output_formats),
        }


@dataclass
class SinkLayer:
    """A layer stored in a canvas"""
    name: str
    pixel_format: LdrPixelFormat
    image: Image.Image
    path: Optional[str] = None               # Set by sinks that write files


@dataclass
class Canvas:
    """Destination image; layers are kept in append order"""
    canvas_id: int
    width: int
    height: int
    mode: BaseMode
    name: str = ""
    layers: List[SinkLayer] = field(default_factory=list)
    location: Optional[str] = None           # Folder for sinks that write files

    @property
    def layer_count(self) -> int:
        return len(self.layers)

    def __str__(self) -> str:
        return f"{self.name or 'canvas'} #{self.canvas_id} ({self.width}x{self.height}, {self.mode.value})"


class CanvasSink(ABC):
    """
    Abstract base class for sink backends.

    Lifecycle:
        1. __init__(config, logger) - create instance
        2. create_canvas(width, height, mode) - new destination image
        3. append_layer(canvas, name, format, data) - once per layer, in stacking order
        4. delete_canvas(canvas) - optional, drops a partially built canvas
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        logger: Optional[Callable[[str], None]] = None,
    ):
        self._config = config or {}
        self._logger = logger
        self._next_canvas_id = 1

    def _log(self, message: str) -> None:
        """Log message via callback"""
        if self._logger:
            self._logger(message)
        else:
            app_logger.debug(f"[{self.capabilities.backend_name}] {message}")

    def _new_canvas(self, width: int, height: int, mode: BaseMode, name: str) -> Canvas:
        """Validate the request and allocate a canvas handle"""
        if width <= 0 or height <= 0:
            raise CanvasCreationError(f"failed to create image: invalid size {width}x{height}")
        canvas = Canvas(canvas_id=self._next_canvas_id, width=width, height=height,
                        mode=BaseMode(mode), name=name)
        self._next_canvas_id += 1
        return canvas

    def _make_layer(self, canvas: Canvas, name: str, pixel_format: LdrPixelFormat,
                    data: bytes) -> SinkLayer:
        """Build the layer image; raises LayerAppendError on mismatched input"""
        image = image_from_buffer(canvas.width, canvas.height, canvas.mode, pixel_format, data)
        return SinkLayer(name=name, pixel_format=pixel_format, image=image)

    # =========================================================================
    # Abstract Properties
    # =========================================================================

    @property
    @abstractmethod
    def capabilities(self) -> SinkCapabilities:
        """Get backend capabilities (static)"""
        pass

    # =========================================================================
    # Sink Operations
    # =========================================================================

    @abstractmethod
    def create_canvas(self, width: int, height: int, mode: BaseMode, name: str = "") -> Canvas:
        """
        Create a destination canvas.

        Args:
            width: Width in pixels
            height: Height in pixels
            mode: BaseMode.GRAYSCALE or BaseMode.COLOR
            name: Display name, usually the source file stem

        Returns:
            Canvas handle

        Raises:
            CanvasCreationError: If the canvas cannot be created
        """
        pass

    @abstractmethod
    def append_layer(self, canvas: Canvas, name: str, pixel_format: LdrPixelFormat,
                     data: bytes) -> SinkLayer:
        """
        Append a layer on top of the canvas' existing layers.

        Args:
            canvas: Handle returned by create_canvas()
            name: Layer name ("" for the default layer)
            pixel_format: Format of data
            data: Packed row-major interleaved 8-bit pixels

        Returns:
            The stored layer

        Raises:
            LayerAppendError: If the layer cannot be added
        """
        pass

    @abstractmethod
    def delete_canvas(self, canvas: Canvas) -> None:
        """Discard a canvas and everything appended to it"""
        pass
