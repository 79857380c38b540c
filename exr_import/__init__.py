"""
EXR Layer Import - OpenEXR channels grouped into layers and converted to 8-bit.

Usage:
    from exr_import import File, Converter, create_sink

    exr_file = File('render.exr')
    if exr_file.load():
        result = Converter(exr_file, sink=create_sink('memory')).convert()
"""

__version__ = "1.0.0"

from .errors import (
    ExrImportError,
    DecodeError,
    ConversionError,
    NotLoadedError,
    UnsupportedLayoutError,
    SinkError,
    CanvasCreationError,
    LayerAppendError,
)
from .exr_file import PixelType, Channel, Layer, File, split_full_channel_name
from .layer_type import LayerType, classify
from .conversion import (
    BaseMode,
    ConversionSettings,
    LdrPixelFormat,
    convert_layer,
)
from .converter import (
    ConversionErrorKind,
    ConversionResult,
    Converter,
    ConverterState,
    LdrLayer,
    convert_to_8_bit,
)
from .decoder import create_decoder, ArrayDecoder, OpenExrDecoder
from .sink import create_sink, MemorySink, DirectorySink
from .importer import ExrImporter, ImportResult, ImportStatus

__all__ = [
    '__version__',
    # Errors
    'ExrImportError',
    'DecodeError',
    'ConversionError',
    'NotLoadedError',
    'UnsupportedLayoutError',
    'SinkError',
    'CanvasCreationError',
    'LayerAppendError',
    # Model
    'PixelType',
    'Channel',
    'Layer',
    'File',
    'split_full_channel_name',
    # Classification and conversion
    'LayerType',
    'classify',
    'BaseMode',
    'ConversionSettings',
    'LdrPixelFormat',
    'convert_layer',
    'ConversionErrorKind',
    'ConversionResult',
    'Converter',
    'ConverterState',
    'LdrLayer',
    'convert_to_8_bit',
    # Backends
    'create_decoder',
    'ArrayDecoder',
    'OpenExrDecoder',
    'create_sink',
    'MemorySink',
    'DirectorySink',
    # Load procedure
    'ExrImporter',
    'ImportResult',
    'ImportStatus',
]
