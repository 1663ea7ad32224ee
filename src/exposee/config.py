"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for exposee:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.exposee/`` on macOS and Windows. See :func:`get_config_dir`,
  :func:`get_cache_dir`, :func:`get_data_dir`.
* **Global config** -- A single :class:`~exposee.models.GlobalConfig`
  JSON file storing transport, sync and cache settings.
* **Precedence resolution** -- :func:`resolve_config` layers environment
  variables over the user file over defaults.

The application descriptor is not part of this file; callers
supply it per fetch.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from exposee.exceptions import ConfigError
from exposee.models import GlobalConfig

_APP_NAME = "exposee"
_CONFIG_FILENAME = "config.json"

ENV_TIMEOUT = "EXPOSEE_TIMEOUT"
ENV_TIME_SHIFT_THRESHOLD = "EXPOSEE_TIME_SHIFT_THRESHOLD"
ENV_CACHE_BACKEND = "EXPOSEE_CACHE_BACKEND"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory layout (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/exposee/`` (default ``~/.config/exposee/``).
    On macOS/Windows: ``~/.exposee/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_cache_dir() -> Path:
    """Return the cache directory used by the disk validator cache.

    On Linux/BSD: ``$XDG_CACHE_HOME/exposee/`` (default ``~/.cache/exposee/``).
    On macOS/Windows: ``~/.exposee/cache/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CACHE_HOME", (".cache",)) / _APP_NAME
    else:
        path = _fallback_base_dir() / "cache"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/exposee/`` (default ``~/.local/share/exposee/``).
    On macOS/Windows: ``~/.exposee/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def _global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the config directory.

    Returns:
        The deserialised :class:`~exposee.models.GlobalConfig`, or a default
        instance when the file does not exist.

    Raises:
        ConfigError: If the file contains invalid JSON or fails validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Precedence resolution ---


def resolve_config() -> GlobalConfig:
    """Resolve the effective configuration.

    Precedence (high to low):
        1. Environment variables (``EXPOSEE_TIMEOUT``,
           ``EXPOSEE_TIME_SHIFT_THRESHOLD``, ``EXPOSEE_CACHE_BACKEND``)
        2. User config (``~/.config/exposee/config.json``)
        3. Defaults

    Raises:
        ConfigError: If the user file or an environment override is invalid.
    """
    data = load_global_config().model_dump()

    timeout = os.environ.get(ENV_TIMEOUT)
    if timeout:
        data["request"]["timeout"] = timeout
    threshold = os.environ.get(ENV_TIME_SHIFT_THRESHOLD)
    if threshold:
        data["sync"]["time_shift_threshold_seconds"] = threshold
    backend = os.environ.get(ENV_CACHE_BACKEND)
    if backend:
        data["cache"]["backend"] = backend

    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration from environment: {exc}") from exc
