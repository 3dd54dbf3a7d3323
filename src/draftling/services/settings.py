"""Settings dataclass and JSON persistence helpers."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Callable, Dict, Mapping

from ..model.keys import DEFAULT_KEY_LENGTH, resolve_key_factory
from ..utils.logging import setup_logging

__all__ = ["Settings", "SettingsStore", "configure_logging"]

LOGGER = logging.getLogger(__name__)
_DEFAULT_SETTINGS_PATH = Path.home() / ".draftling" / "settings.json"
_SETTINGS_VERSION = 1
_TRUE_VALUES = {"1", "true", "yes", "on", "debug"}


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in _TRUE_VALUES


def _parse_key_length(value: str) -> int:
    length = int(value, 10)
    if length < 1:
        raise ValueError("block key length must be at least 1")
    return length


# environment variable -> (settings field, parser)
_ENV_OVERRIDES: Mapping[str, tuple[str, Callable[[str], Any]]] = {
    "DRAFTLING_LOG_LEVEL": ("log_level", str.strip),
    "DRAFTLING_LOG_DIR": ("log_dir", str),
    "DRAFTLING_DEBUG_LOGGING": ("debug_logging", _parse_bool),
    "DRAFTLING_BLOCK_KEY_LENGTH": ("block_key_length", _parse_key_length),
}


@dataclass(slots=True)
class Settings:
    """Library settings: logging behaviour and generated block key length."""

    debug_logging: bool = False
    log_level: str = "INFO"
    log_dir: str | None = None
    block_key_length: int = DEFAULT_KEY_LENGTH
    metadata: dict[str, Any] = field(default_factory=dict)

    def effective_log_level(self) -> int:
        """Return the numeric logging level these settings ask for."""

        if self.debug_logging:
            return logging.DEBUG
        level = logging.getLevelName(str(self.log_level).strip().upper())
        if isinstance(level, int):
            return level
        LOGGER.warning("Unknown log level %r; falling back to INFO", self.log_level)
        return logging.INFO

    def key_factory(self) -> Callable[[], str]:
        """Return a block key generator honouring ``block_key_length``."""

        return resolve_key_factory(settings=self)


class SettingsStore:
    """Reads and writes :class:`Settings` as a JSON file."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or _DEFAULT_SETTINGS_PATH

    @property
    def path(self) -> Path:
        return self._path

    def load(self, *, overrides: Mapping[str, Any] | None = None) -> Settings:
        """Load settings; ``overrides`` win over the file, the environment wins over both."""

        settings = self._from_payload(self._read_payload())
        settings = _merge(settings, overrides or {}, source="caller")
        return _merge(settings, _environment_values(), source="environment")

    def save(self, settings: Settings) -> Path:
        """Persist settings to disk with an atomic file write."""

        payload = asdict(settings)
        payload["version"] = _SETTINGS_VERSION
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(".tmp")
        tmp_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        tmp_path.replace(self._path)
        LOGGER.debug("Settings saved to %s", self._path)
        return self._path

    def _read_payload(self) -> Mapping[str, Any]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            LOGGER.warning("Settings file %s is not valid JSON: %s", self._path, exc)
            return {}
        if not isinstance(payload, Mapping):
            LOGGER.warning("Settings file %s does not contain an object", self._path)
            return {}
        return payload

    def _from_payload(self, payload: Mapping[str, Any]) -> Settings:
        if not payload:
            return Settings()
        settings = _merge(Settings(), payload, source=str(self._path))
        LOGGER.debug("Settings loaded from %s", self._path)
        return settings


def configure_logging(settings: Settings, *, console: bool = True, force: bool = False) -> Path:
    """Install the draftling log handlers described by ``settings``."""

    return setup_logging(
        settings.effective_log_level(),
        log_dir=settings.log_dir,
        console=console,
        force=force,
    )


def _environment_values() -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for env_name, (field_name, parse) in _ENV_OVERRIDES.items():
        raw = os.environ.get(env_name)
        if raw is None:
            continue
        try:
            values[field_name] = parse(raw)
        except ValueError as exc:
            LOGGER.warning("Ignoring environment override %s=%r: %s", env_name, raw, exc)
    return values


def _merge(settings: Settings, values: Mapping[str, Any], *, source: str) -> Settings:
    known = {item.name for item in fields(Settings)}
    updates = {key: value for key, value in values.items() if key in known and value is not None}
    if not updates:
        return settings
    LOGGER.debug("Applying settings from %s: %s", source, sorted(updates))
    return replace(settings, **updates)
