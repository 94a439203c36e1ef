import os
import json
import logging

logger = logging.getLogger(__name__)

SETTINGS_FILE = os.path.join(os.getcwd(), "rszkit_settings.json")
DEFAULT_SETTINGS = {
    "rsz_json_path": "",
    "json_indent": 2,
    "relative_userdata_strings": False,
    "log_level": "INFO",
}


def load_settings(path: str = None) -> dict:
    path = path or SETTINGS_FILE
    if os.path.exists(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                settings = json.load(f)
            if not isinstance(settings, dict):
                raise ValueError("settings file must hold a JSON object")
            # Ensure all default keys are present
            for key, value in DEFAULT_SETTINGS.items():
                settings.setdefault(key, value)
            return settings
        except (IOError, ValueError) as e:
            logger.error("Error loading settings from %s: %s", path, e)
    return DEFAULT_SETTINGS.copy()


def save_settings(settings: dict, path: str = None):
    path = path or SETTINGS_FILE
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(settings, f, indent=4)
    except IOError as e:
        logger.error("Error saving settings to %s: %s", path, e)
