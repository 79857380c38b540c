"""
Path utilities for application data, logs and default output
Resolves per-user directories on Windows and POSIX platforms
"""
import os
import sys

# Import app configuration for centralized naming
from app_config import APP_DATA_FOLDER, DEFAULT_OUTPUT_SUBFOLDER

# Overrides the app data root, mostly for tests and CI
APP_DATA_ENV = "EXR_IMPORT_HOME"


def get_app_data_dir():
    r"""
    Get application data directory (for logs, user config, etc.)

    Returns:
        Path to %LOCALAPPDATA%\{APP_DATA_FOLDER} (Windows) or
        ~/.{APP_DATA_FOLDER} elsewhere, unless EXR_IMPORT_HOME is set
    """
    override = os.environ.get(APP_DATA_ENV)
    if override:
        app_dir = override
    elif sys.platform == 'win32':
        local_app_data = os.environ.get('LOCALAPPDATA')
        if not local_app_data:
            # Fallback to APPDATA if LOCALAPPDATA not available
            local_app_data = os.environ.get('APPDATA', os.path.expanduser('~'))
        app_dir = os.path.join(local_app_data, APP_DATA_FOLDER)
    else:
        app_dir = os.path.join(os.path.expanduser('~'), f'.{APP_DATA_FOLDER}')

    os.makedirs(app_dir, exist_ok=True)

    return app_dir


def get_log_dir():
    """
    Get log directory path

    Returns:
        Path to {app data}/Logs
    """
    log_dir = os.path.join(get_app_data_dir(), 'Logs')
    os.makedirs(log_dir, exist_ok=True)
    return log_dir


def get_default_output_dir():
    """Default folder for layers written by the directory sink"""
    return os.path.join(get_app_data_dir(), DEFAULT_OUTPUT_SUBFOLDER)
