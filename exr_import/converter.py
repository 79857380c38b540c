"""
Converts a loaded File into 8-bit layers on a destination canvas

We try to map the structure of the EXR file as closely as possible to
canvas layers: one canvas per file, one canvas layer per EXR layer, in the
File's layer order.
"""
import os
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional, Tuple

from .conversion import BaseMode, ConversionSettings, LdrPixelFormat, convert_layer
from .errors import NotLoadedError, SinkError, UnsupportedLayoutError
from .exr_file import File, Layer
from .layer_type import LayerType, classify
from .logger import app_logger
from .sink import Canvas, CanvasSink


class ConverterState(Enum):
    """Conversion lifecycle"""
    UNLOADED = auto()      # File has not been loaded
    LOADED = auto()        # Ready to convert
    CONVERTING = auto()    # Layers are being converted
    CONVERTED = auto()     # Every layer reached the sink
    FAILED = auto()        # Stopped at the first error


class ConversionErrorKind(Enum):
    """Why a conversion stopped"""
    NOT_LOADED = "not_loaded"
    CANVAS_CREATION_FAILED = "canvas_creation_failed"
    LAYER_APPEND_FAILED = "layer_append_failed"
    UNSUPPORTED_LAYOUT = "unsupported_layout"


@dataclass
class LdrLayer:
    """One converted layer"""
    name: str
    layer_type: LayerType
    pixel_format: LdrPixelFormat
    width: int
    height: int
    data: bytes


@dataclass
class ConversionResult:
    """Result of a conversion run"""
    success: bool
    canvas: Optional[Canvas] = None
    base_mode: Optional[BaseMode] = None
    layers: List[LdrLayer] = field(default_factory=list)

    # Failure info
    error: Optional[str] = None
    error_kind: Optional[ConversionErrorKind] = None
    failed_layer: Optional[str] = None


def decide_base_mode(layer_types) -> BaseMode:
    """Grayscale only when there is at least one layer and every layer is Y or YA"""
    layer_types = list(layer_types)
    if layer_types and all(layer_type.is_grayscale for layer_type in layer_types):
        return BaseMode.GRAYSCALE
    return BaseMode.COLOR


class Converter:
    """
    Drives the conversion of one File into a sink.

    The base mode of the canvas is decided once from all layer types before
    any pixel is touched. Layers already appended when a later layer fails
    stay in the sink; callers that need all-or-nothing can delete the
    canvas returned in the result.
    """

    def __init__(self, file: File, settings: Optional[ConversionSettings] = None,
                 sink: Optional[CanvasSink] = None):
        """
        Args:
            file: File to convert, must be loaded
            settings: Conversion settings (defaults if None)
            sink: Destination (in-memory sink if None)
        """
        if sink is None:
            from .sink import MemorySink
            sink = MemorySink()

        self._file = file
        self._settings = settings or ConversionSettings()
        self._sink = sink
        self._state = ConverterState.LOADED if file.is_loaded() else ConverterState.UNLOADED

    @property
    def state(self) -> ConverterState:
        return self._state

    @property
    def settings(self) -> ConversionSettings:
        return self._settings

    @property
    def sink(self) -> CanvasSink:
        return self._sink

    def classify_layers(self) -> List[Tuple[Layer, LayerType]]:
        return [(layer, classify(layer)) for layer in self._file.layers]

    def convert(self) -> ConversionResult:
        """
        Convert every layer and hand it to the sink.

        Returns:
            ConversionResult; on failure error/error_kind describe the cause
        """
        if not self._file.is_loaded():
            self._state = ConverterState.UNLOADED
            return self._fail(str(NotLoadedError()), ConversionErrorKind.NOT_LOADED)

        self._state = ConverterState.CONVERTING
        width = self._file.get_width()
        height = self._file.get_height()

        classified = self.classify_layers()
        base_mode = decide_base_mode(layer_type for _, layer_type in classified)
        grayscale_image = base_mode is BaseMode.GRAYSCALE

        name = os.path.splitext(os.path.basename(self._file.get_path()))[0]
        try:
            canvas = self._sink.create_canvas(width, height, base_mode, name=name)
        except SinkError as e:
            return self._fail(str(e), ConversionErrorKind.CANVAS_CREATION_FAILED,
                              base_mode=base_mode)

        app_logger.info(
            f"Converting {len(classified)} layer(s) of {self._file.get_path()} "
            f"to a {base_mode.value} {width}x{height} canvas"
        )

        converted: List[LdrLayer] = []
        for layer, layer_type in classified:
            display_name = layer.name or "<default>"
            try:
                if layer_type is LayerType.UNDEFINED:
                    raise UnsupportedLayoutError(layer.name, layer.channel_names)
                data, pixel_format = convert_layer(self._settings, layer, layer_type,
                                                   grayscale_image)
            except UnsupportedLayoutError as e:
                return self._fail(str(e), ConversionErrorKind.UNSUPPORTED_LAYOUT,
                                  canvas=canvas, base_mode=base_mode,
                                  layers=converted, failed_layer=layer.name)

            try:
                self._sink.append_layer(canvas, layer.name, pixel_format, data)
            except SinkError as e:
                return self._fail(str(e), ConversionErrorKind.LAYER_APPEND_FAILED,
                                  canvas=canvas, base_mode=base_mode,
                                  layers=converted, failed_layer=layer.name)

            converted.append(LdrLayer(
                name=layer.name,
                layer_type=layer_type,
                pixel_format=pixel_format,
                width=width,
                height=height,
                data=data,
            ))
            app_logger.debug(f"Layer {display_name}: {layer_type.value} -> {pixel_format.name}")

        self._state = ConverterState.CONVERTED
        return ConversionResult(success=True, canvas=canvas, base_mode=base_mode,
                                layers=converted)

    def _fail(self, message: str, kind: ConversionErrorKind, **details) -> ConversionResult:
        if self._state is not ConverterState.UNLOADED:
            self._state = ConverterState.FAILED
        app_logger.error(f"Conversion failed: {message}")
        return ConversionResult(success=False, error=message, error_kind=kind, **details)


def convert_to_8_bit(file: File, settings: Optional[ConversionSettings] = None,
                     sink: Optional[CanvasSink] = None) -> ConversionResult:
    """Convert a loaded File into 8-bit layers on a new canvas of the sink"""
    return Converter(file, settings, sink).convert()
