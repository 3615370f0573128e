"""Configuration loader and validator for dataentry.

Provides ``ConfigManager`` which reads a JSON config (with a
comment and trailing-comma tolerant sanitizer) from
``~/.config/dataentry/config.json`` and merges it over the defaults.

Also provides ``validate_config(conf)`` which normalizes and
validates config keys, raising ``ValueError`` on invalid values,
and ``EntryConfig``, the typed view of a validated dict used by
the entry core.
"""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass

from dataentry.core.auto_enter import AutoEnterConfig
from dataentry.persistence import save_json

logger = logging.getLogger(__name__)

USER_CONFIG_PATH = '~/.config/dataentry/config.json'

# Single source of truth for default configuration
DEFAULT_CONFIG: dict = {
    'auto_length_raw': False,
    'enter_length_raw': 4,
    'auto_length_formatted': False,
    'enter_length_formatted': 4,
    'auto_regex': False,
    'enter_regex': '/.*/i',
    'auto_time': False,
    'timeout': 2.5,
    'criteria_logic': 'or',
    'copy_data': 'raw',
    'after': 'clear',
    'format': '*',
    'max_length': 1024,
    'cursor': '|',
    'devices': [],
    'grab_devices': False,
    'debug': False,
}

CRITERIA_LOGIC_CHOICES = ('or', 'and')
COPY_DATA_CHOICES = ('raw', 'formatted')
AFTER_CHOICES = ('clear', 'keep')

LENGTH_MIN = 1
LENGTH_MAX = 65536
TIMEOUT_MIN = 0.1
TIMEOUT_MAX = 30.0

_BOOL_KEYS = ('auto_length_raw', 'auto_length_formatted', 'auto_regex', 'auto_time', 'grab_devices', 'debug')
_LENGTH_KEYS = ('enter_length_raw', 'enter_length_formatted', 'max_length')


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _sanitize_json_text(s: str) -> str:
    """Remove ``#``/``//`` comments and trailing commas from JSON-like text."""
    # Hash-style line comments
    s = re.sub(r"^[ \t]*#.*$", "", s, flags=re.MULTILINE)
    # C++-style line comments (not inside "/pattern/" values: require
    # the slashes to start the line or follow whitespace/comma)
    s = re.sub(r"(^|[\s,])//.*$", r"\1", s, flags=re.MULTILINE)
    # Trailing commas before } or ]
    s = re.sub(r",[ \t\r\n]+(\}|\])", r"\1", s)
    return s


def _choice(conf: dict, key: str, choices: tuple) -> str:
    value = conf.get(key, DEFAULT_CONFIG[key])
    if value not in choices:
        raise ValueError(f"Invalid '{key}': {value!r} (must be one of {', '.join(choices)})")
    return value


# ------------------------------------------------------------------
# Validation
# ------------------------------------------------------------------

def validate_config(conf: dict | None) -> dict:
    """Validate and normalize configuration dictionary.

    Returns a normalized dict with all expected keys.
    Raises ``ValueError`` on invalid values.
    """
    if conf is None:
        conf = {}

    out = dict(DEFAULT_CONFIG)

    # switches: booleans
    for key in _BOOL_KEYS:
        val = conf.get(key, DEFAULT_CONFIG[key])
        if not isinstance(val, bool):
            raise ValueError(f"Invalid '{key}': must be boolean")
        out[key] = val

    # lengths: int in [1, 65536]
    for key in _LENGTH_KEYS:
        raw = conf.get(key, DEFAULT_CONFIG[key])
        if isinstance(raw, bool):
            raise ValueError(f"Invalid '{key}': {raw}")
        try:
            val = int(raw)
        except (TypeError, ValueError):
            raise ValueError(f"Invalid '{key}': {raw}")
        if not (LENGTH_MIN <= val <= LENGTH_MAX):
            raise ValueError(f"Invalid '{key}': {raw} (must be between {LENGTH_MIN} and {LENGTH_MAX})")
        out[key] = val

    # timeout: seconds in [0.1, 30]
    t_raw = conf.get('timeout', DEFAULT_CONFIG['timeout'])
    try:
        t_val = float(t_raw)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid 'timeout': {t_raw}")
    if not (TIMEOUT_MIN <= t_val <= TIMEOUT_MAX):
        raise ValueError(f"Invalid 'timeout': {t_raw} (must be between {TIMEOUT_MIN} and {TIMEOUT_MAX})")
    out['timeout'] = t_val

    out['criteria_logic'] = _choice(conf, 'criteria_logic', CRITERIA_LOGIC_CHOICES)
    out['copy_data'] = _choice(conf, 'copy_data', COPY_DATA_CHOICES)
    out['after'] = _choice(conf, 'after', AFTER_CHOICES)

    # enter_regex / format: strings; malformed patterns fail safe at use time
    for key in ('enter_regex', 'format'):
        val = conf.get(key, DEFAULT_CONFIG[key])
        if not isinstance(val, str):
            raise ValueError(f"Invalid '{key}': must be a string")
        out[key] = val

    # cursor: exactly one character
    cur = conf.get('cursor', DEFAULT_CONFIG['cursor'])
    if not isinstance(cur, str) or len(cur) != 1:
        raise ValueError("Invalid 'cursor': must be a single character")
    out['cursor'] = cur

    # devices: list of device-name fragments (empty = every keyboard)
    devs = conf.get('devices', DEFAULT_CONFIG['devices'])
    if not isinstance(devs, list) or not all(isinstance(d, str) and d for d in devs):
        raise ValueError("Invalid 'devices': must be a list of non-empty strings")
    out['devices'] = list(devs)

    return out


def _read_and_merge(path: str, target_config: dict, debug: bool = False) -> bool:
    """Read a JSON file, validate, and merge into *target_config*.

    Returns True on success, False on any error.
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            raw = f.read()
    except OSError as exc:
        logger.warning("Cannot read config %s: %s", path, exc)
        return False

    try:
        cfg = json.loads(raw)
    except json.JSONDecodeError:
        try:
            cfg = json.loads(_sanitize_json_text(raw))
        except json.JSONDecodeError as exc:
            logger.warning("JSON parse error in %s: %s", path, exc)
            return False

    if not isinstance(cfg, dict):
        logger.warning("Config %s is not a JSON object", path)
        return False

    try:
        validated = validate_config(cfg)
    except ValueError as verr:
        logger.warning("Invalid config %s: %s", path, verr)
        return False

    # Only override keys explicitly present in source
    for k in cfg:
        if k in validated:
            target_config[k] = validated[k]
        elif debug:
            logger.debug("Unknown config key %r in %s ignored", k, path)
    return True


# ------------------------------------------------------------------
# Typed view for the entry core
# ------------------------------------------------------------------

@dataclass(frozen=True)
class EntryConfig:
    auto_enter: AutoEnterConfig = AutoEnterConfig()
    copy_data: str = 'raw'
    after: str = 'clear'
    format: str = '*'
    max_length: int = 1024
    cursor: str = '|'

    @classmethod
    def from_dict(cls, conf: dict | None) -> "EntryConfig":
        """Validate *conf* and build the typed configuration."""
        conf = validate_config(conf)
        return cls(
            auto_enter=AutoEnterConfig.from_config(conf),
            copy_data=conf['copy_data'],
            after=conf['after'],
            format=conf['format'],
            max_length=conf['max_length'],
            cursor=conf['cursor'],
        )


# ------------------------------------------------------------------
# ConfigManager
# ------------------------------------------------------------------

class ConfigManager:
    """Centralized configuration management with load/save/validate."""

    def __init__(self, config_path: str | None = None, debug: bool = False):
        self._config_path = config_path or os.path.expanduser(USER_CONFIG_PATH)
        self._debug = debug
        self._config: dict = dict(DEFAULT_CONFIG)
        self._load_config()

    # -- internal -------------------------------------------------------

    def _load_config(self) -> bool:
        """Defaults overlaid with the file (if it exists).

        On a read or validation error the current values are left as they
        were and False is returned.
        """
        loaded = dict(DEFAULT_CONFIG)
        if self._config_path and os.path.exists(self._config_path):
            if not _read_and_merge(self._config_path, loaded, debug=self._debug):
                return False
        self._config = loaded
        return True

    # -- public ---------------------------------------------------------

    def reload(self) -> bool:
        """Reload configuration from file. Returns True on success."""
        return self._load_config()

    def save(self, target_path: str | None = None) -> bool:
        """Atomically save configuration to file. Returns True on success."""
        save_path = target_path or self._config_path
        try:
            save_json(save_path, self.get_all())
            return True
        except OSError as exc:
            logger.error("Cannot save config to %s: %s", save_path, exc)
            return False

    def get(self, key: str, default=None):
        """Get a single configuration value."""
        return self._config.get(key, default)

    def set(self, key: str, value) -> None:
        """Set a single configuration value."""
        self._config[key] = value

    def update(self, updates: dict) -> None:
        """Update multiple configuration values."""
        self._config.update(updates)

    def get_all(self) -> dict:
        """Return all configuration (excluding internal keys)."""
        return {k: v for k, v in self._config.items() if not k.startswith('_')}

    def reset_to_defaults(self) -> None:
        """Reset configuration to DEFAULT_CONFIG."""
        self._config = dict(DEFAULT_CONFIG)

    def validate(self) -> bool:
        """Validate current configuration. Returns True if valid."""
        try:
            validate_config(self._config)
            return True
        except ValueError:
            return False

    def entry_config(self) -> EntryConfig:
        """Typed configuration for the entry core (raises ``ValueError`` if invalid)."""
        return EntryConfig.from_dict(self._config)

    @property
    def config_path(self) -> str:
        """Current config file path."""
        return self._config_path
