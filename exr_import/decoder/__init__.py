"""
Decoder backends for exr_import.

Package structure:
    exr_import/decoder/
    ├── __init__.py          # This file - exports
    ├── interface.py         # DecoderInterface ABC, DecodedImage, DecodedChannel
    ├── factory.py           # create_decoder(), get_available_decoders()
    ├── openexr_adapter.py   # OpenExrDecoder (OpenEXR/Imath bindings)
    └── array_adapter.py     # ArrayDecoder (numpy planes in memory)

Usage:
    from exr_import.decoder import create_decoder

    decoder = create_decoder('openexr')
    decoded = decoder.decode('render.exr')
"""

from .interface import (
    DecoderInterface,
    DecodedChannel,
    DecodedImage,
)

from .factory import (
    create_decoder,
    get_available_decoders,
)

from .openexr_adapter import OpenExrDecoder, OPENEXR_AVAILABLE, expand_subsampled
from .array_adapter import ArrayDecoder

__all__ = [
    'DecoderInterface',
    'DecodedChannel',
    'DecodedImage',
    'create_decoder',
    'get_available_decoders',
    'OpenExrDecoder',
    'OPENEXR_AVAILABLE',
    'expand_subsampled',
    'ArrayDecoder',
]
