"""
Sink abstraction layer for exr_import.

A sink is the destination of converted layers: it creates a canvas and
receives 8-bit layers in stacking order.

Package structure:
    exr_import/sink/
    ├── __init__.py         # This file - exports
    ├── interface.py        # CanvasSink ABC, Canvas, SinkLayer
    ├── factory.py          # create_sink(), get_available_sinks()
    ├── utils.py            # Buffer -> PIL image, atomic saves
    ├── memory/             # In-memory backend
    │   └── adapter.py      # MemorySink
    └── directory/          # Image files on disk
        └── adapter.py      # DirectorySink

Usage:
    from exr_import.sink import create_sink

    sink = create_sink('directory', config={'output': {'directory': 'out'}})
    canvas = sink.create_canvas(640, 480, BaseMode.COLOR, name='render')
    sink.append_layer(canvas, 'beauty', LdrPixelFormat.RGBA, data)
"""

from .interface import (
    CanvasSink,
    SinkCapabilities,
    Canvas,
    SinkLayer,
)

from .factory import (
    create_sink,
    create_sink_from_config,
    get_available_sinks,
    get_sink_info,
)

from .memory import MemorySink
from .directory import DirectorySink

from .utils import (
    image_from_buffer,
    safe_layer_filename,
    save_image_atomic,
)

__all__ = [
    # Interface and data classes
    'CanvasSink',
    'SinkCapabilities',
    'Canvas',
    'SinkLayer',
    # Factory functions
    'create_sink',
    'create_sink_from_config',
    'get_available_sinks',
    'get_sink_info',
    # Adapters
    'MemorySink',
    'DirectorySink',
    # Utilities
    'image_from_buffer',
    'safe_layer_filename',
    'save_image_atomic',
]
