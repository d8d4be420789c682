"""Static configuration for sigexport.

User-editable settings (mention handling, logging) live in an optional JSON
file; the Signal directory can also come from the environment or a .env file.
"""

import json
import os
import sys

from dotenv import load_dotenv

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

load_dotenv()

# config.json is optional; every setting below has a default.
CONFIG_PATH = os.getenv("SIGEXPORT_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def _load_json_config(path: str, required: bool = False) -> dict:
    """Load a config file with a flat, user-friendly schema."""

    if not os.path.exists(path):
        if required:
            raise FileNotFoundError(f"Config file not found: {path}")
        return {}

    with open(path, "r", encoding="utf-8") as handle:
        return json.load(handle)


def default_signal_dir() -> str:
    """Return the platform's default Signal Desktop directory."""

    home = os.path.expanduser("~")
    if sys.platform == "darwin":
        return os.path.join(home, "Library", "Application Support", "Signal")
    if sys.platform == "win32":
        return os.path.join(os.getenv("APPDATA", home), "Signal")
    config_home = os.getenv("XDG_CONFIG_HOME") or os.path.join(home, ".config")
    return os.path.join(config_home, "Signal")


def load(path: str = CONFIG_PATH, required: bool = False) -> None:
    """(Re)load module-level settings from a config file.

    Only the implicit default config may be missing; pass required=True for
    a path the user named explicitly.
    """

    global CONFIG, SIGNAL_DIR, ON_INVALID_MENTION, UNRESOLVED_LABEL, LOGGING

    CONFIG = _load_json_config(path, required)

    # -d on the command line wins over both of these.
    SIGNAL_DIR = os.getenv("SIGNAL_DIR") or CONFIG.get("signal_dir") or default_signal_dir()

    # Mention handling:
    # - on_invalid_mention: "fail" aborts the export, "skip" drops the message
    # - unresolved_label: name shown for mentions of unknown participants
    _mentions = CONFIG.get("mentions", {})
    ON_INVALID_MENTION = _mentions.get("on_invalid_mention", "fail")
    UNRESOLVED_LABEL = _mentions.get("unresolved_label", "Unknown")

    # Logging configuration (optional).
    LOGGING = CONFIG.get("logging", {"enabled": True})


load()
