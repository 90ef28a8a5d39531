from constants import DEFAULT_SETTINGS, DEFAULT_CONFIG_FILE, CONFIG_PATH_ENV, MIN_PASSWORD_LENGTH_FLOOR
from exceptions import ConfigurationError
from datetime import datetime, timedelta
import copy
import yaml
import os
import re

import logging

# Retrieve main logger
logger = logging.getLogger("main")

# Environment variable -> (section, key, type)
ENV_OVERRIDES = {
    "HOST": ("server", "host", str),
    "PORT": ("server", "port", int),
    "DATA_DIR": ("storage", "data_dir", str),
    "DATABASE_FILE": ("storage", "database_file", str),
    "SESSION_TTL_DAYS": ("security", "session_ttl_days", int),
    "MIN_PASSWORD_LENGTH": ("security", "min_password_length", int),
    "ADMIN_USERNAME": ("admin", "default_username", str),
    "ADMIN_PASSWORD": ("admin", "default_password", str),
}


class Settings:
    """Configuration built once at startup and handed to the components that need it."""

    def __init__(self, data):
        self.data = data

    @property
    def host(self):
        return self.data["server"]["host"]

    @property
    def port(self):
        return self.data["server"]["port"]

    @property
    def data_dir(self):
        return self.data["storage"]["data_dir"]

    @property
    def database_path(self):
        return os.path.join(self.data_dir, self.data["storage"]["database_file"])

    @property
    def database_uri(self):
        return "sqlite:///" + self.database_path

    @property
    def seed_demo_content(self):
        return bool(self.data["storage"].get("seed_demo_content", True))

    @property
    def session_ttl(self):
        return timedelta(days=self.data["security"]["session_ttl_days"])

    @property
    def session_max_age(self):
        return int(self.session_ttl.total_seconds())

    @property
    def min_password_length(self):
        return self.data["security"]["min_password_length"]

    @property
    def admin_username(self):
        return self.data["admin"]["default_username"]

    @property
    def default_admin_password(self):
        return self.data["admin"]["default_password"]

    @property
    def branding(self):
        return self.data["branding"]

    def replace(self, **overrides):
        """Return a copy with `section__key=value` overrides applied (handy in tests and scripts)."""
        data = copy.deepcopy(self.data)
        for dotted, value in overrides.items():
            section, key = dotted.split("__", 1)
            data.setdefault(section, {})[key] = value
        return Settings(validate_settings(data))


def merge_settings(base, overrides):
    """Recursively merge `overrides` into a copy of `base`."""
    merged = copy.deepcopy(base)
    for key, value in (overrides or {}).items():
        if value is None:
            continue
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_settings(merged[key], value)
        else:
            merged[key] = value
    return merged


def _resolve_config_path(config_path, environ):
    if config_path:
        return config_path
    explicit = (environ.get(CONFIG_PATH_ENV) or "").strip()
    if explicit:
        resolved = explicit if os.path.isabs(explicit) else os.path.abspath(explicit)
        if not os.path.exists(resolved):
            logger.warning(f"{CONFIG_PATH_ENV} set to {resolved}, but file not found.")
            return None
        return resolved
    if os.path.exists(DEFAULT_CONFIG_FILE):
        return DEFAULT_CONFIG_FILE
    return None


def read_config_file(path):
    try:
        with open(path, "r") as yaml_file:
            loaded = yaml.safe_load(yaml_file) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to parse config at {path}: {e}")
        return None
    if not isinstance(loaded, dict):
        logger.error(f"Config at {path} must be a mapping, ignoring it.")
        return None
    logger.info(f"Loaded resource hub customization from {path}")
    return loaded


def apply_environment(data, environ):
    for name, (section, key, cast) in ENV_OVERRIDES.items():
        raw = (environ.get(name) or "").strip()
        if not raw:
            continue
        try:
            data[section][key] = cast(raw)
        except ValueError:
            raise ConfigurationError(f"{name} must be a valid {cast.__name__}, got {raw!r}")
    return data


def validate_settings(data):
    port = data["server"]["port"]
    if not isinstance(port, int) or port <= 0:
        raise ConfigurationError("PORT must be a positive integer.")

    ttl = data["security"]["session_ttl_days"]
    if not isinstance(ttl, (int, float)) or ttl <= 0:
        raise ConfigurationError("SESSION_TTL_DAYS must be a positive integer.")

    min_length = data["security"]["min_password_length"]
    if not isinstance(min_length, int) or min_length < MIN_PASSWORD_LENGTH_FLOOR:
        raise ConfigurationError(f"MIN_PASSWORD_LENGTH must be at least {MIN_PASSWORD_LENGTH_FLOOR} characters.")

    if not str(data["admin"]["default_username"]).strip():
        raise ConfigurationError("ADMIN_USERNAME must not be empty.")
    return data


def load_settings(config_path=None, environ=None):
    """Defaults, then the YAML config file, then environment variables."""
    if environ is None:
        environ = os.environ

    data = copy.deepcopy(DEFAULT_SETTINGS)
    path = _resolve_config_path(config_path, environ)
    if path:
        data = merge_settings(data, read_config_file(path))

    data = apply_environment(data, environ)
    return Settings(validate_settings(data))


def format_branding_text(text, settings, **tokens):
    applied = {
        "siteName": settings.branding.get("site_name", ""),
        "year": str(datetime.now().year),
    }
    applied.update(tokens)
    for key, value in applied.items():
        text = re.sub(r"{{\s*" + re.escape(key) + r"\s*}}", lambda _m: str(value), text, flags=re.IGNORECASE)
    return text
