"""
Directory Sink Adapter

Writes every appended layer to disk as an 8-bit image file. Each canvas is
a folder named after the source; layers are numbered in stacking order:

    <output>/<canvas name>/00_<layer>.png
    <output>/<canvas name>/01_<layer>.png

A name already taken on disk gets a numeric suffix (<canvas name>_2) so
canvases never share a folder.
"""
import os
from typing import Optional, Dict, Any, Callable

from ..interface import CanvasSink, SinkCapabilities, Canvas, SinkLayer
from ..utils import safe_layer_filename, save_image_atomic
from ...conversion import BaseMode, LdrPixelFormat
from ...errors import CanvasCreationError, LayerAppendError


# Output format name -> (PIL format, file extension)
OUTPUT_FORMATS = {
    'png': ('PNG', 'png'),
    'tiff': ('TIFF', 'tif'),
    'tif': ('TIFF', 'tif'),
}


class DirectorySink(CanvasSink):
    """
    Sink that persists layers as image files.

    Reads from config['output']:
        directory: Root folder (default: app data Layers folder)
        format: 'png' (default) or 'tiff'
    """

    _CAPABILITIES = SinkCapabilities(
        backend_name="Directory",
        persists_output=True,
        supports_delete=True,
        output_formats=['png', 'tiff'],
    )

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        logger: Optional[Callable[[str], None]] = None,
    ):
        super().__init__(config=config, logger=logger)

        output = self._config.get('output', {})
        self._output_dir = output.get('directory') or ''
        format_name = str(output.get('format', 'png')).lower()
        if format_name not in OUTPUT_FORMATS:
            raise ValueError(
                f"Unsupported output format: '{format_name}'. "
                f"Use one of: {', '.join(sorted(OUTPUT_FORMATS))}"
            )
        self._pil_format, self._extension = OUTPUT_FORMATS[format_name]

    @property
    def capabilities(self) -> SinkCapabilities:
        return self._CAPABILITIES

    @property
    def output_dir(self) -> str:
        if not self._output_dir:
            from utils_paths import get_default_output_dir
            self._output_dir = get_default_output_dir()
        return self._output_dir

    def create_canvas(self, width: int, height: int, mode: BaseMode, name: str = "") -> Canvas:
        canvas = self._new_canvas(width, height, mode, name)
        folder = safe_layer_filename(name) if name else f"canvas_{canvas.canvas_id}"

        try:
            os.makedirs(self.output_dir, exist_ok=True)
            location = self._claim_folder(folder)
        except OSError as e:
            raise CanvasCreationError(
                f"failed to create image folder for {canvas} in {self.output_dir}: {e}") from e

        canvas.location = location
        self._log(f"Created {canvas} at {location}")
        return canvas

    def _claim_folder(self, folder: str) -> str:
        """Create a folder no other canvas uses: folder, folder_2, folder_3, ..."""
        candidate = folder
        suffix = 2
        while True:
            location = os.path.join(self.output_dir, candidate)
            try:
                os.mkdir(location)
                return location
            except FileExistsError:
                candidate = f"{folder}_{suffix}"
                suffix += 1

    def append_layer(self, canvas: Canvas, name: str, pixel_format: LdrPixelFormat,
                     data: bytes) -> SinkLayer:
        if not canvas.location:
            raise LayerAppendError(f"failed to add layer: canvas #{canvas.canvas_id} has no folder")

        layer = self._make_layer(canvas, name, pixel_format, data)
        filename = f"{len(canvas.layers):02d}_{safe_layer_filename(name)}.{self._extension}"
        path = os.path.join(canvas.location, filename)

        try:
            save_image_atomic(layer.image, path, self._pil_format)
        except OSError as e:
            raise LayerAppendError(f"failed to add layer '{name}': {e}") from e

        layer.path = path
        canvas.layers.append(layer)
        self._log(f"Wrote layer '{name}' to {path}")
        return layer

    def delete_canvas(self, canvas: Canvas) -> None:
        """Remove the files written for this canvas, then its folder if empty"""
        for layer in canvas.layers:
            if layer.path and os.path.exists(layer.path):
                os.remove(layer.path)
        canvas.layers.clear()

        if canvas.location and os.path.isdir(canvas.location) and not os.listdir(canvas.location):
            os.rmdir(canvas.location)
        self._log(f"Deleted canvas #{canvas.canvas_id}")
