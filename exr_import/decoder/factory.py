"""
Decoder Factory

Creates decoder adapters by backend name.
"""
from typing import Optional, Dict, Any, List, Callable, Type

from .interface import DecoderInterface


# Available backends registry
_BACKENDS: Dict[str, Type[DecoderInterface]] = {}


def _register_backends():
    """Register available decoder backends (lazy loading)"""
    if _BACKENDS:
        return  # Already registered

    from .openexr_adapter import OpenExrDecoder
    _BACKENDS['openexr'] = OpenExrDecoder
    _BACKENDS['exr'] = OpenExrDecoder  # Alias

    from .array_adapter import ArrayDecoder
    _BACKENDS['array'] = ArrayDecoder
    _BACKENDS['memory'] = ArrayDecoder  # Alias


def get_available_decoders() -> List[str]:
    """
    Get list of decoder backend names (no aliases).

    Returns:
        Sorted list of names usable with create_decoder()
    """
    _register_backends()

    unique = set()
    seen_classes = set()
    for name, cls in _BACKENDS.items():
        if cls not in seen_classes:
            seen_classes.add(cls)
            unique.add(name)

    return sorted(unique)


def create_decoder(
    backend: str,
    config: Optional[Dict[str, Any]] = None,
    logger: Optional[Callable[[str], None]] = None,
) -> DecoderInterface:
    """
    Create a decoder adapter for the specified backend.

    Args:
        backend: Backend name ('openexr', 'array', ...)
        config: Configuration dict to pass to adapter
        logger: Log callback function

    Returns:
        DecoderInterface implementation

    Raises:
        ValueError: If backend is not recognized
    """
    _register_backends()

    backend_lower = backend.lower().strip()
    if backend_lower not in _BACKENDS:
        raise ValueError(
            f"Unknown decoder backend: '{backend}'. "
            f"Available backends: {', '.join(get_available_decoders())}"
        )

    return _BACKENDS[backend_lower](config=config, logger=logger)
