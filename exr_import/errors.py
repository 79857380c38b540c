"""
Exception hierarchy for decoding, conversion and sink failures
"""


class ExrImportError(Exception):
    """Base class for all errors raised by exr_import"""


class DecodeError(ExrImportError):
    """The decoder could not produce channel data for a source"""


class ConversionError(ExrImportError):
    """A File could not be converted to 8-bit layers"""


class NotLoadedError(ConversionError):
    """Conversion was requested on a File that never loaded"""

    def __init__(self, message="file not loaded in memory"):
        super().__init__(message)


class UnsupportedLayoutError(ConversionError):
    """The classifier could not map a layer's channels to a known layout"""

    def __init__(self, layer_name, channel_names=()):
        self.layer_name = layer_name
        self.channel_names = tuple(channel_names)
        shown = layer_name or "<default>"
        super().__init__(
            f"not implemented for this channel layout: layer '{shown}' "
            f"with channels {list(self.channel_names)}"
        )


class SinkError(ExrImportError):
    """The destination sink rejected an operation"""


class CanvasCreationError(SinkError):
    """The sink refused to create a destination canvas"""


class LayerAppendError(SinkError):
    """The sink refused to add a converted layer"""
