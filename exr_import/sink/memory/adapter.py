"""
Memory Sink Adapter

Keeps canvases and their layers as PIL images in memory. Useful for hosts
that display the result directly and for tests.
"""
from typing import Optional, Dict, Any, Callable, List

from PIL import Image

from ..interface import CanvasSink, SinkCapabilities, Canvas, SinkLayer
from ...conversion import BaseMode, LdrPixelFormat
from ...errors import LayerAppendError


class MemorySink(CanvasSink):
    """Sink that stores everything it receives"""

    _CAPABILITIES = SinkCapabilities(
        backend_name="Memory",
        persists_output=False,
        supports_delete=True,
        output_formats=[],
    )

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        logger: Optional[Callable[[str], None]] = None,
    ):
        super().__init__(config=config, logger=logger)
        self._canvases: Dict[int, Canvas] = {}

    @property
    def capabilities(self) -> SinkCapabilities:
        return self._CAPABILITIES

    @property
    def canvases(self) -> List[Canvas]:
        """Live canvases in creation order"""
        return list(self._canvases.values())

    def get_canvas(self, canvas_id: int) -> Optional[Canvas]:
        return self._canvases.get(canvas_id)

    def create_canvas(self, width: int, height: int, mode: BaseMode, name: str = "") -> Canvas:
        canvas = self._new_canvas(width, height, mode, name)
        self._canvases[canvas.canvas_id] = canvas
        self._log(f"Created {canvas}")
        return canvas

    def append_layer(self, canvas: Canvas, name: str, pixel_format: LdrPixelFormat,
                     data: bytes) -> SinkLayer:
        if canvas.canvas_id not in self._canvases:
            raise LayerAppendError(f"failed to add layer: unknown canvas #{canvas.canvas_id}")

        layer = self._make_layer(canvas, name, pixel_format, data)
        canvas.layers.append(layer)
        self._log(f"Appended layer '{name}' ({pixel_format.name}) to canvas #{canvas.canvas_id}")
        return layer

    def delete_canvas(self, canvas: Canvas) -> None:
        if self._canvases.pop(canvas.canvas_id, None) is not None:
            self._log(f"Deleted canvas #{canvas.canvas_id}")

    def composite(self, canvas: Canvas) -> Image.Image:
        """Flatten the canvas, first appended layer at the bottom"""
        result = Image.new("RGBA", (canvas.width, canvas.height))
        for layer in canvas.layers:
            result.alpha_composite(layer.image.convert("RGBA"))
        if canvas.mode is BaseMode.GRAYSCALE:
            return result.convert("LA")
        return result
