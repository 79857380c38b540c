"""
Load procedure: decode an EXR file and convert it into a sink

Mirrors what a host application does when it opens an .exr file: load the
file, convert it, and report a status together with an error message.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from .config import Config
from .conversion import ConversionSettings
from .converter import ConversionResult, Converter
from .decoder import DecoderInterface, create_decoder
from .exr_file import File
from .layer_type import LayerType, classify
from .logger import app_logger
from .sink import CanvasSink, Canvas, create_sink_from_config


class ImportStatus(Enum):
    SUCCESS = "success"
    EXECUTION_ERROR = "execution_error"


@dataclass
class ImportResult:
    """Outcome of one import"""
    status: ImportStatus
    canvas: Optional[Canvas] = None
    conversion: Optional[ConversionResult] = None
    error: Optional[str] = None
    discarded: bool = False            # Partial canvas was deleted

    @property
    def success(self) -> bool:
        return self.status is ImportStatus.SUCCESS


@dataclass
class LayerSummary:
    """Layer listing entry"""
    name: str
    channels: List[str] = field(default_factory=list)
    layer_type: LayerType = LayerType.UNDEFINED


class ExrImporter:
    """
    Imports EXR files into a sink.

    Backends and settings come from the config unless passed explicitly.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        decoder: Optional[DecoderInterface] = None,
        sink: Optional[CanvasSink] = None,
        settings: Optional[ConversionSettings] = None,
    ):
        self.config = config if config is not None else Config()
        self.decoder = decoder or create_decoder(self.config.get('decoder', 'openexr'),
                                                 self.config.data)
        self.sink = sink or create_sink_from_config(self.config.data)
        self.settings = settings or self.config.get_conversion_settings()
        self.discard_partial = bool(self.config.get('discard_partial_canvas', False))

    def load(self, path: str) -> Tuple[File, Optional[str]]:
        """Load a file; returns (file, error message or None)"""
        exr_file = File(path, decoder=self.decoder)
        if not exr_file.load():
            return exr_file, exr_file.load_error
        return exr_file, None

    def describe(self, path: str) -> List[LayerSummary]:
        """
        List layers, channels and classified layout without converting.

        Raises:
            ValueError: If the file cannot be loaded
        """
        exr_file, error = self.load(path)
        if error:
            raise ValueError(error)
        return [
            LayerSummary(name=layer.name, channels=layer.channel_names, layer_type=classify(layer))
            for layer in exr_file.layers
        ]

    def import_file(self, path: str) -> ImportResult:
        """Load and convert one file"""
        app_logger.info(f"Importing {path}")

        exr_file, error = self.load(path)
        if error:
            return ImportResult(status=ImportStatus.EXECUTION_ERROR, error=error)

        conversion = Converter(exr_file, self.settings, self.sink).convert()
        if conversion.success:
            app_logger.info(f"Imported {len(conversion.layers)} layer(s) from {path}")
            return ImportResult(status=ImportStatus.SUCCESS, canvas=conversion.canvas,
                                conversion=conversion)

        discarded = False
        if self.discard_partial and conversion.canvas is not None:
            self.sink.delete_canvas(conversion.canvas)
            discarded = True
            app_logger.info(f"Discarded partial canvas for {path}")

        return ImportResult(
            status=ImportStatus.EXECUTION_ERROR,
            canvas=None if discarded else conversion.canvas,
            conversion=conversion,
            error=conversion.error,
            discarded=discarded,
        )
