"""
Application Configuration - Central place for app identity
Change these values when renaming the application
"""

# Application Identity
APP_NAME = "ExrLayerImport"
APP_DISPLAY_NAME = "EXR Layer Import"
APP_DESCRIPTION = "Splits OpenEXR channels into layers and converts them to 8-bit images"

# Directory names (used for app data paths)
APP_DATA_FOLDER = APP_NAME

# File names
MAIN_CONFIG_FILE = "config.json"
LOG_FILE = "exr_import.log"

# Default paths
DEFAULT_OUTPUT_SUBFOLDER = "Layers"
