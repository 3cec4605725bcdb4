"""Per-application settings and credentials on disk.

Each generated CLI keeps its state in one directory (``~/.<cli_name>/`` by
default) holding two JSON documents with separate lifecycles:

* ``config.json`` -- the settings tree: arbitrary nested keys, never the
  credential. Managed by ``config set/delete/reset``.
* ``credentials.json`` -- ``{"apiKey": "..."}`` only, mode ``0o600``.
  Managed by ``login``/``logout``; ``config reset`` leaves it alone.

Nothing is cached in memory: every :class:`ConfigStore` operation reads the
files again, so each command observes the latest persisted state. Writers
are not synchronised; concurrent writes to the same directory race and the
last one wins.

All writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) so a crash never leaves a half-written document.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from nouncli.exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.json"
CREDENTIALS_FILENAME = "credentials.json"
CREDENTIAL_KEY = "apiKey"

MISSING: Any = object()
"""Sentinel returned by :meth:`ConfigStore.get` for absent keys."""


def default_config_dir(cli_name: str) -> Path:
    """Return ``~/.<cli_name>``, the default config directory of a CLI."""
    return Path.home() / f".{cli_name or 'cli'}"


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str, mode: Optional[int] = None) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file lives next to *path* so that ``os.replace`` is an
    atomic rename on POSIX. When *mode* is given it is applied to the temp
    file before any content is written, so secrets are never readable by
    others, even momentarily.
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
        if mode is not None:
            os.chmod(tmp_path, mode)
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


def _write_file(path: Path, data: str, mode: Optional[int] = None) -> None:
    try:
        _atomic_write(path, data, mode=mode)
    except OSError as exc:
        raise ConfigError(f"Cannot write {path}: {exc}") from exc
    logger.debug("Wrote %s", path)


def _read_json_object(path: Path) -> Optional[dict[str, Any]]:
    """Return the JSON object stored at *path*, or ``None`` if absent or malformed."""
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError, OSError) as exc:
        logger.debug("Ignoring unreadable %s: %s", path, exc)
        return None
    if not isinstance(data, dict):
        logger.debug("Ignoring %s: top-level value is not an object", path)
        return None
    return data


def _coerce(value: str, current: Any) -> Any:
    """Coerce a command-line string to the type of the value it replaces."""
    if isinstance(current, bool):
        lowered = value.lower()
        if lowered in ("true", "1", "yes"):
            return True
        if lowered in ("false", "0", "no"):
            return False
        raise ConfigError(f"Expected true/false, got: {value}")
    if isinstance(current, int):
        try:
            return int(value)
        except ValueError:
            raise ConfigError(f"Expected integer, got: {value}") from None
    return value


def mask_secret(secret: str) -> str:
    """Show only the first four characters of a credential."""
    if len(secret) <= 4:
        return "*" * len(secret)
    return secret[:4] + "*" * (len(secret) - 4)


class ConfigStore:
    """Read and write the settings/credentials pair of one config directory.

    Args:
        config_dir: Directory holding ``config.json`` and
            ``credentials.json``. It is created on the first write.

    Example::

        store = ConfigStore(Path("~/.shop").expanduser())
        store.set("output.format", "json")
        store.get("output.format")   # -> "json"
    """

    def __init__(self, config_dir: Path) -> None:
        self._dir = Path(config_dir)

    @property
    def config_dir(self) -> Path:
        return self._dir

    @property
    def path(self) -> Path:
        """The settings file, ``<config_dir>/config.json``."""
        return self._dir / CONFIG_FILENAME

    @property
    def credentials_path(self) -> Path:
        return self._dir / CREDENTIALS_FILENAME

    # ------------------------------------------------------------------ #
    # Whole-document operations
    # ------------------------------------------------------------------ #

    def load(self) -> dict[str, Any]:
        """Return the settings tree merged with ``apiKey`` from the credentials file.

        A missing or malformed file is treated as absent; it never prevents
        the other file from being read.
        """
        config = _read_json_object(self.path) or {}
        config.pop(CREDENTIAL_KEY, None)
        creds = _read_json_object(self.credentials_path)
        if creds is not None and isinstance(creds.get(CREDENTIAL_KEY), str):
            config[CREDENTIAL_KEY] = creds[CREDENTIAL_KEY]
        return config

    def save(self, config: dict[str, Any]) -> None:
        """Split *config* across the two files.

        ``apiKey`` goes to ``credentials.json`` (mode ``0o600``), everything
        else to ``config.json``. When *config* has no ``apiKey`` the
        credentials file is left untouched.
        """
        settings = {k: v for k, v in config.items() if k != CREDENTIAL_KEY}
        _write_file(self.path, json.dumps(settings, indent=2) + "\n")

        api_key = config.get(CREDENTIAL_KEY)
        if api_key is not None:
            self.save_credentials(api_key)

    def save_credentials(self, api_key: str) -> None:
        """Persist *api_key* alone to ``credentials.json`` with owner-only permissions."""
        _write_file(
            self.credentials_path,
            json.dumps({CREDENTIAL_KEY: api_key}, indent=2) + "\n",
            mode=0o600,
        )

    def has_credentials(self) -> bool:
        return self.credentials_path.is_file()

    def clear_credentials(self) -> bool:
        """Delete the credentials file. Returns whether a file was removed."""
        if self.credentials_path.is_file():
            try:
                self.credentials_path.unlink()
            except OSError as exc:
                raise ConfigError(
                    f"Cannot remove {self.credentials_path}: {exc}"
                ) from exc
            return True
        return False

    def reset(self) -> None:
        """Overwrite the settings with ``{}``. Credentials are kept."""
        _write_file(self.path, "{}\n")

    # ------------------------------------------------------------------ #
    # Dotted-path operations
    # ------------------------------------------------------------------ #

    def get(self, key: str, default: Any = MISSING) -> Any:
        """Return the value at dotted path *key*, or *default* when absent."""
        value: Any = self.load()
        for part in key.split("."):
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                return default
        return value

    def set(self, key: str, value: str) -> Any:
        """Set dotted path *key* to *value*, creating intermediate objects.

        Non-object values in the way are replaced by objects. When the
        current value is a bool or an int, *value* is coerced to that type.

        Returns:
            The value actually stored.

        Raises:
            ConfigError: For the credential key (use ``login``), or when the
                value cannot be coerced.
        """
        keys = key.split(".")
        if keys[0] == CREDENTIAL_KEY:
            raise ConfigError(f"'{CREDENTIAL_KEY}' is managed by 'login' and 'logout'")
        if any(not k for k in keys):
            raise ConfigError(f"Invalid config key: {key}")

        config = self.load()
        target = config
        for k in keys[:-1]:
            if not isinstance(target.get(k), dict):
                target[k] = {}
            target = target[k]

        coerced = _coerce(value, target.get(keys[-1]))
        target[keys[-1]] = coerced
        # Only the settings file is rewritten; the credential is untouched.
        config.pop(CREDENTIAL_KEY, None)
        self.save(config)
        return coerced

    def delete(self, key: str) -> bool:
        """Remove dotted path *key*. Returns ``False`` if it did not exist."""
        keys = key.split(".")
        if keys[0] == CREDENTIAL_KEY:
            raise ConfigError(f"'{CREDENTIAL_KEY}' is managed by 'login' and 'logout'")

        config = self.load()
        config.pop(CREDENTIAL_KEY, None)
        target: Any = config
        for k in keys[:-1]:
            if not isinstance(target, dict) or not isinstance(target.get(k), dict):
                return False
            target = target[k]
        if keys[-1] not in target:
            return False
        del target[keys[-1]]
        self.save(config)
        return True

    def list_lines(self) -> list[str]:
        """Flatten the config into ``key.path = value`` lines.

        Plain objects are recursed into; arrays are rendered as JSON on a
        single line. The credential is masked.
        """
        lines: list[str] = []

        def _flatten(obj: dict[str, Any], prefix: str) -> None:
            for k, v in obj.items():
                path = f"{prefix}.{k}" if prefix else k
                if isinstance(v, dict):
                    _flatten(v, path)
                elif isinstance(v, (list, bool)) or v is None:
                    lines.append(f"{path} = {json.dumps(v)}")
                else:
                    lines.append(f"{path} = {v}")

        config = self.load()
        if CREDENTIAL_KEY in config:
            config[CREDENTIAL_KEY] = mask_secret(config[CREDENTIAL_KEY])
        _flatten(config, "")
        return lines
