import logging
import os

from otpmigrate.utils.file_io import read_json

logger = logging.getLogger(__name__)

SETTINGS_ENV_VAR = 'OTPMIGRATE_SETTINGS'
default_settings_path = os.path.join(os.path.expanduser('~'), '.otpmigrate', 'settings.json')

DEFAULT_SETTINGS = {
    "qr_dir": "qrCodes",
    "json_indent": 4,
    "overwrite": False,
    "log_level": "INFO",
}

def settings_path(explicit_path=None):
    """Settings file to use: explicit path, then environment, then the default location"""
    if explicit_path:
        return explicit_path
    return os.environ.get(SETTINGS_ENV_VAR) or default_settings_path

def load_settings(path=None):
    """Load settings, filling in defaults for anything the file does not set

    Args:
        path (str, optional): Settings file. Defaults to settings_path().

    Returns:
        dict: The merged settings
    """
    path = settings_path(path)
    settings = dict(DEFAULT_SETTINGS)

    current_settings = read_json(path)
    for key, value in current_settings.items():
        if key in DEFAULT_SETTINGS:
            settings[key] = value
        else:
            logger.warning(f"Ignoring unknown setting '{key}' in {path}")

    settings["log_level"] = _log_level(settings["log_level"], path)
    return settings

def _log_level(value, path):
    """Upper-case level name, or the default when logging does not know it"""
    level = str(value).upper()
    if not isinstance(logging.getLevelName(level), int):
        logger.warning(f"Unknown log_level '{value}' in {path}, using {DEFAULT_SETTINGS['log_level']}")
        return DEFAULT_SETTINGS["log_level"]
    return level
