# Created by Meri Kasprak with the assistance of Gemini.
# Released freely under the GNU General Public License version 3. USE AT YOUR OWN RISK.

import os
import json
import urllib.parse

import requests

from spoiler_io import SpoilerIO
from spoiler_modes import Mode, PREFERENCE_KEY, enabled_modes

PREFS_PATH = os.path.join(os.path.expanduser("~"), ".mediaspoiler_prefs.json")


def resolve_mode(raw_value, modes, enable_mark, io=None):
    """
    Maps a stored preference value onto a usable Mode.
    Unknown values are corrected to the configured fallback, never rejected.
    """
    known = {m.value for m in Mode}
    allowed = {Mode(m) for m in modes if isinstance(m, Mode) or m in known}
    if raw_value:
        try:
            candidate = Mode(raw_value)
        except ValueError:
            candidate = None
        if candidate in allowed:
            return candidate

    fallback = Mode.HIDEMARKED if enable_mark else Mode.SHOWALL
    if raw_value:
        (io or SpoilerIO()).log_event(
            "error",
            f"Misconfiguration: '{PREFERENCE_KEY}' is not a valid mode",
            {
                "valid_modes": [m.value for m in Mode if m in allowed],
                "configured_default": raw_value,
            },
        )
    return fallback


def resolve_default_options(default_options, config, io=None):
    """Validates the site-wide default in place and returns the options dict."""
    raw = default_options.get(PREFERENCE_KEY, "") or ""
    modes = enabled_modes(config.enable_mark).values()
    default_options[PREFERENCE_KEY] = resolve_mode(raw, modes, config.enable_mark, io).value
    return default_options


def parser_mode(value):
    """Only 'noimg' changes the per-embed parser output; every other mode shares one entry."""
    return Mode.NOIMG if value == Mode.NOIMG.value else None


# --- Preference Stores ---

class JsonPreferenceStore:
    """Per-user options kept in a small JSON file, keyed by user name."""

    def __init__(self, config, path=None, io=None):
        self.config = config
        self.io = io or SpoilerIO()
        self.path = path or PREFS_PATH
        self.defaults = resolve_default_options({PREFERENCE_KEY: config.default_mode}, config, self.io)
        self.options = self._load()

    def _load(self):
        if os.path.exists(self.path):
            try:
                with open(self.path, 'r', encoding='utf-8') as f:
                    raw = json.load(f)
                if isinstance(raw, dict):
                    return {str(user): dict(opts) for user, opts in raw.items() if isinstance(opts, dict)}
            except (OSError, ValueError) as e:
                self.io.log(f"[Warning] Could not load preference file: {e}")
        return {}

    def save(self):
        try:
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump(self.options, f, indent=4)
            return True
        except OSError as e:
            self.io.log(f"[Warning] Could not save preference file: {e}")
            return False

    def get_default_option(self, name):
        return self.defaults.get(name)

    def get_option(self, user, name):
        if user is None:
            return self.get_default_option(name)
        return self.options.get(str(user), {}).get(name, self.get_default_option(name))

    def set_option(self, user, name, value):
        self.options.setdefault(str(user), {})[name] = value


class RemotePreferenceStore:
    """Looks preferences up from a remote preference service over HTTP."""

    def __init__(self, config, base_url=None, token=None, io=None, timeout=10):
        self.config = config
        self.io = io or SpoilerIO()
        parsed = urllib.parse.urlparse(base_url or config.get("preference_url", ""))
        self.base_url = f"{parsed.scheme}://{parsed.netloc}{parsed.path.rstrip('/')}"
        self.headers = {}
        token = token or config.get("preference_token", "")
        if token:
            self.headers["Authorization"] = f"Bearer {token}"
        self.timeout = timeout
        self.defaults = resolve_default_options({PREFERENCE_KEY: config.default_mode}, config, self.io)

    def get_default_option(self, name):
        return self.defaults.get(name)

    def fetch_options(self, user):
        """Returns (success, options_or_error)."""
        url = f"{self.base_url}/users/{urllib.parse.quote(str(user), safe='')}/options"
        try:
            response = requests.get(url, headers=self.headers, timeout=self.timeout)
            if response.status_code == 200:
                data = response.json()
                if isinstance(data, dict):
                    return True, data
                return False, "Preference service returned an unexpected payload."
            return False, f"Preference lookup failed. (Error {response.status_code})"
        except requests.exceptions.Timeout:
            return False, "Preference service timed out."
        except (requests.exceptions.RequestException, ValueError) as e:
            return False, f"Preference service unreachable. ({e})"

    def get_option(self, user, name):
        if user is None:
            return self.get_default_option(name)
        success, result = self.fetch_options(user)
        if not success:
            self.io.log(f"[Warning] {result} Using default for '{name}'.")
            return self.get_default_option(name)
        return result.get(name, self.get_default_option(name))


# --- Render options / cache key ---

class RenderOptions:
    """
    Per-render options the host's parser cache is keyed on.
    Options listed in in_cache_key split the cache; lazy_load callables are
    evaluated once per render from the live user preference.
    """

    def __init__(self, store, user=None):
        self.store = store
        self.user = user
        self.defaults = {}
        self.in_cache_key = {}
        self.lazy_load = {}
        self._values = {}
        register_render_options(store, self.defaults, self.in_cache_key, self.lazy_load)

    def get_option(self, name):
        if name not in self._values:
            if self.user is not None and name in self.lazy_load:
                self._values[name] = self.lazy_load[name](self)
            else:
                self._values[name] = self.defaults.get(name)
        return self._values[name]

    def cache_key(self):
        parts = []
        for name in sorted(self.in_cache_key):
            if not self.in_cache_key[name]:
                continue
            value = self.get_option(name)
            parts.append(f"{name}={value.value if isinstance(value, Mode) else (value or '')}")
        return "!".join(parts)


def register_render_options(store, defaults, in_cache_key, lazy_load):
    defaults[PREFERENCE_KEY] = parser_mode(store.get_default_option(PREFERENCE_KEY))
    in_cache_key[PREFERENCE_KEY] = True
    lazy_load[PREFERENCE_KEY] = lambda options: parser_mode(
        options.store.get_option(options.user, PREFERENCE_KEY)
    )


def resolve_for_cache_key(options):
    """The mode a render is cached under (Mode.NOIMG or None)."""
    return options.get_option(PREFERENCE_KEY)


def user_mode(store, user, config, io=None):
    """Live display mode for a user, validated against the enabled modes."""
    raw = store.get_option(user, PREFERENCE_KEY)
    return resolve_mode(raw, enabled_modes(config.enable_mark).values(), config.enable_mark, io)

