# Created by Meri Kasprak with the assistance of Gemini.
# Released freely under the GNU General Public License version 3. USE AT YOUR OWN RISK.

import os
import json

# --- Configuration ---
CONFIG_DIR = os.path.join(os.path.expanduser("~"), ".mediaspoiler")
CONFIG_FILE = os.path.join(CONFIG_DIR, "config.json")

DEFAULT_CONFIG = {
    "enable_mark": True,         # Sensitivity marking + 'hidemarked' mode exist at all
    "legacy_media_dom": False,   # Host emits the old <div class="thumb"> media markup
    "default_mode": "",          # Site-wide default for the 'mediaspoiler' preference
    "article_path": "/wiki/$1",
    "file_namespace": "File",
    "language": "en",
    "preference_url": "",        # Remote preference service (optional)
    "preference_token": "",
}


class ConfigurationInvalid(Exception):
    """The host configuration cannot support the requested transform."""


class SpoilerConfig:
    """Explicit configuration handed to every component at construction."""

    def __init__(self, **overrides):
        values = dict(DEFAULT_CONFIG)
        for key, value in overrides.items():
            if key not in DEFAULT_CONFIG:
                raise ConfigurationInvalid(f"Unknown configuration option '{key}'")
            values[key] = value
        self.values = values

    @classmethod
    def load(cls, path=None, **overrides):
        """
        Reads the JSON config file (if any) and layers keyword overrides on top.
        Unknown keys in the file are ignored so older files keep working.
        """
        path = path or CONFIG_FILE
        stored = {}
        if os.path.exists(path):
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    raw = json.load(f)
                if isinstance(raw, dict):
                    stored = {k: v for k, v in raw.items() if k in DEFAULT_CONFIG}
            except (OSError, ValueError) as e:
                print(f"[Warning] Could not load config file {path}: {e}")
        stored.update(overrides)
        return cls(**stored)

    def save(self, path=None):
        """Writes the current values to the JSON file. Returns (success, message)."""
        path = path or CONFIG_FILE
        try:
            folder = os.path.dirname(path)
            if folder:
                os.makedirs(folder, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(self.values, f, indent=4)
            return True, f"Saved settings to {path}"
        except OSError as e:
            return False, f"Could not save settings: {e}"

    def get(self, key, default=None):
        return self.values.get(key, default)

    @property
    def enable_mark(self):
        return bool(self.values["enable_mark"])

    @property
    def legacy_media_dom(self):
        return bool(self.values["legacy_media_dom"])

    @property
    def default_mode(self):
        return self.values["default_mode"] or ""

    @property
    def language(self):
        return self.values["language"] or "en"

    def __repr__(self):
        shown = {k: v for k, v in self.values.items() if k != "preference_token"}
        return f"SpoilerConfig({shown})"
