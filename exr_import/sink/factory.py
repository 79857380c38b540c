"""
Sink Factory

Factory module for creating sink adapters based on configuration.
"""
from typing import Optional, Dict, Any, List, Callable, Type

from .interface import CanvasSink


# Available backends registry
_BACKENDS: Dict[str, Type[CanvasSink]] = {}


def _register_backends():
    """Register available sink backends (lazy loading)"""
    if _BACKENDS:
        return  # Already registered

    from .memory import MemorySink
    _BACKENDS['memory'] = MemorySink

    from .directory import DirectorySink
    _BACKENDS['directory'] = DirectorySink
    _BACKENDS['dir'] = DirectorySink  # Alias
    _BACKENDS['files'] = DirectorySink  # Alias


def get_available_sinks() -> List[str]:
    """
    Get list of available sink backend names.

    Returns:
        List of backend names that can be used with create_sink()
    """
    _register_backends()

    # Return unique backend names (no aliases)
    unique = set()
    seen_classes = set()

    for name, cls in _BACKENDS.items():
        if cls not in seen_classes:
            seen_classes.add(cls)
            unique.add(name)

    return sorted(unique)


def get_sink_info() -> Dict[str, Dict[str, Any]]:
    """
    Get detailed information about available sinks.

    Returns:
        Dict mapping backend name to info dict with:
            - name: Display name
            - description: Short description
            - aliases: Alternative names for this backend
            - capabilities: SinkCapabilities as dict
    """
    _register_backends()

    descriptions = {
        'memory': 'Keep layers in memory as PIL images',
        'directory': 'Write each layer as an image file',
    }

    info = {}
    for name in get_available_sinks():
        cls = _BACKENDS[name]
        info[name] = {
            'name': cls._CAPABILITIES.backend_name,
            'description': descriptions.get(name, ''),
            'aliases': [alias for alias, alias_cls in _BACKENDS.items()
                        if alias_cls is cls and alias != name],
            'capabilities': cls._CAPABILITIES.to_dict(),
        }
    return info


def create_sink(
    backend: str,
    config: Optional[Dict[str, Any]] = None,
    logger: Optional[Callable[[str], None]] = None,
) -> CanvasSink:
    """
    Create a sink adapter for the specified backend.

    Args:
        backend: Backend name ('memory', 'directory', etc.)
        config: Configuration dict to pass to adapter
        logger: Log callback function

    Returns:
        CanvasSink implementation for the requested backend

    Raises:
        ValueError: If backend is not recognized
    """
    _register_backends()

    backend_lower = backend.lower().strip()

    if backend_lower not in _BACKENDS:
        available = get_available_sinks()
        raise ValueError(
            f"Unknown sink backend: '{backend}'. "
            f"Available backends: {', '.join(available)}"
        )

    adapter_class = _BACKENDS[backend_lower]
    return adapter_class(config=config, logger=logger)


def create_sink_from_config(
    config: Dict[str, Any],
    logger: Optional[Callable[[str], None]] = None,
) -> CanvasSink:
    """
    Create sink adapter based on application config.

    Reads 'sink' from config; defaults to the directory sink.

    Args:
        config: Application config dict
        logger: Log callback function

    Returns:
        Appropriate CanvasSink for the configured backend
    """
    return create_sink(config.get('sink') or 'directory', config, logger)
