"""
hipcatConfig.py

Layered configuration for hipcat. Sources, lowest precedence first:

  /etc/hipcat.conf     -> system-wide JSON file
  ~/.hipcat.conf       -> per-user JSON file
  ./hipcat.conf        -> current directory JSON file
  HIPCHAT_URL, HIPCAT_ROOM, HIPCAT_API_TOKEN  -> environment
  -r/--room            -> command-line flag (room only, applied by the caller)

Basic usage:
  from hipcat import ConfigResolver
  cfg = ConfigResolver().resolve().with_room(args.room).require_room()
"""

from __future__ import annotations

import dataclasses
import json
import os
import pathlib
import typing as t
from dataclasses import dataclass, field
from loguru import logger


ROOM_FLAG = "-r/--room"

# field name -> (label used in diagnostics, environment variable)
FIELDS: dict[str, tuple[str, str]] = {
    "hipchat_url": ("HipchatURL", "HIPCHAT_URL"),
    "room": ("Room", "HIPCAT_ROOM"),
    "api_token": ("APIToken", "HIPCAT_API_TOKEN"),
}


@dataclass(frozen=True)
class HipcatConfig:
    hipchat_url: str = ""
    room: str = ""
    api_token: str = field(default="", repr=False)  # secret, keep out of repr/logs
    sources: tuple[str, ...] = field(default=(), compare=False)  # paths consulted, for diagnostics

    def with_room(self, room: str | None) -> "HipcatConfig":
        """Return a copy with room replaced by the flag value, if one was given."""
        if not room:
            return self
        return dataclasses.replace(self, room=room)

    def require_room(self) -> "HipcatConfig":
        if not self.room:
            raise ConfigMissingFieldError("room", [*self.sources, ROOM_FLAG])
        return self


def default_paths() -> list[pathlib.Path]:
    """The three well-known config file locations, in merge order."""
    try:
        home = pathlib.Path.home()
    except RuntimeError:
        # no resolvable home directory
        home = pathlib.Path("/")
    return [
        pathlib.Path("/etc/hipcat.conf"),
        home / ".hipcat.conf",
        pathlib.Path("./hipcat.conf"),
    ]


# ----------------------------- Merge stages ------------------------------

def read_config_file(path: pathlib.Path) -> dict[str, str] | None:
    """
    Read one config file.

    Returns None when the file does not exist, otherwise the known string
    fields it defines. Raises ConfigFileError for anything else.
    """
    try:
        with path.open("r", encoding="utf-8") as f:
            raw = f.read()
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigFileError(path, str(e)) from e

    try:
        data = json.loads(raw)
    except ValueError as e:
        raise ConfigFileError(path, f"invalid JSON: {e}") from e
    if data is None:
        # a bare null sets nothing
        return {}
    if not isinstance(data, dict):
        raise ConfigFileError(path, f"expected a JSON object, got {type(data).__name__}")

    values: dict[str, str] = {}
    # keys match case-insensitively; the last occurrence wins
    for raw_key, value in data.items():
        key = raw_key.lower()
        if key not in FIELDS or value is None:
            continue
        if not isinstance(value, str):
            raise ConfigFileError(path, f"'{raw_key}' must be a string, got {type(value).__name__}")
        values[key] = value
    return values


def apply_file_values(acc: t.Mapping[str, str], values: t.Mapping[str, str] | None) -> dict[str, str]:
    """Overlay every field a file defines, even an empty one."""
    merged = dict(acc)
    if values:
        merged.update(values)
    return merged


def apply_env_values(acc: t.Mapping[str, str], environ: t.Mapping[str, str]) -> dict[str, str]:
    """Overlay fields whose environment variable is set and non-empty."""
    merged = dict(acc)
    for name, (_, env_var) in FIELDS.items():
        value = environ.get(env_var)
        if value:
            merged[name] = value
    return merged


class ConfigResolver:
    """
    Resolve the effective HipcatConfig from files and environment.

    The room is not validated here: its highest-precedence source is the
    command-line flag, which the caller applies afterwards with
    HipcatConfig.with_room() followed by HipcatConfig.require_room().
    """

    def __init__(
        self,
        paths: t.Sequence[str | pathlib.Path] | None = None,
        environ: t.Mapping[str, str] | None = None,
    ) -> None:
        self._paths = [pathlib.Path(p) for p in paths] if paths is not None else default_paths()
        self._environ = environ if environ is not None else os.environ

    @property
    def source_names(self) -> list[str]:
        return [_display_path(p) for p in self._paths]

    def resolve(self) -> HipcatConfig:
        acc: dict[str, str] = {}
        for path in self._paths:
            values = read_config_file(path)
            if values is None:
                logger.debug(f"Config file {path} not found, skipping")
                continue
            logger.debug(f"Loaded config file {path} (fields: {', '.join(sorted(values)) or 'none'})")
            acc = apply_file_values(acc, values)
        acc = apply_env_values(acc, self._environ)

        for name in ("hipchat_url", "api_token"):
            if not acc.get(name):
                raise ConfigMissingFieldError(name, self.source_names)

        return HipcatConfig(
            hipchat_url=acc["hipchat_url"],
            room=acc.get("room", ""),
            api_token=acc["api_token"],
            sources=tuple(self.source_names),
        )


def _display_path(path: pathlib.Path) -> str:
    home = None
    try:
        home = pathlib.Path.home()
    except RuntimeError:
        pass
    if home is not None and path.parent == home and path.is_absolute():
        return f"~/{path.name}"
    text = str(path)
    if not path.is_absolute() and not text.startswith("."):
        text = f"./{text}"
    return text


# ------------------------------ Exceptions -------------------------------

class HipcatError(Exception):
    """Base class for every hipcat failure."""


class ConfigFileError(HipcatError):
    def __init__(self, path: str | pathlib.Path, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = str(path)
        self.reason = reason


class ConfigMissingFieldError(HipcatError):
    def __init__(self, field_name: str, sources: t.Sequence[str]) -> None:
        label, env_var = FIELDS[field_name]
        checked = [env_var, *sources]
        article = "an" if label[0] in "AEIOU" else "a"
        super().__init__(f"Could not find {article} {label} in {', '.join(checked)}")
        self.field = field_name
        self.sources = checked
