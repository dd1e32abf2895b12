"""Locate and read the optional ledger configuration file."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from types import ModuleType

from water_credit.settings import WaterCreditSettings

LOGGER = logging.getLogger(__name__)

CONFIG_STEM = Path("config") / "water_credit"
_SUFFIXES: tuple[str, ...] = (".yml", ".yaml", ".json")


def candidate_paths(
    path: str | None, settings: WaterCreditSettings
) -> tuple[Path, ...]:
    """Return the files to try, most specific first.

    An explicit ``path`` wins, then ``WATER_CREDIT_CONFIG``; otherwise
    ``config/water_credit`` is tried with each supported suffix.
    """

    explicit = path if path is not None else settings.config_path
    if explicit:
        return (Path(explicit),)
    return tuple(CONFIG_STEM.with_suffix(suffix) for suffix in _SUFFIXES)


def load_structured_config(
    path: str | None, settings: WaterCreditSettings
) -> dict[str, object] | None:
    """Load the first readable configuration mapping.

    Args:
        path: Explicit configuration path provided by the caller.
        settings: Environment-derived settings used for fallback discovery.

    Returns:
        Top-level mapping of the first file that parses, otherwise ``None``.
    """

    for candidate in candidate_paths(path, settings):
        if not candidate.is_file():
            continue
        data = _read_mapping(candidate)
        if data is not None:
            LOGGER.debug("Loaded configuration", extra={"config_path": str(candidate)})
            return data
    return None


def _read_mapping(path: Path) -> dict[str, object] | None:
    """Parse ``path`` as JSON or YAML depending on its suffix.

    Unreadable or malformed files yield ``None`` so defaults stay in force.
    """

    suffix = path.suffix.lower()
    if suffix not in _SUFFIXES:
        LOGGER.warning("Unsupported configuration format: %s", path)
        return None
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        LOGGER.warning("Cannot read configuration %s: %s", path, exc)
        return None

    if suffix == ".json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            LOGGER.warning("Ignoring malformed JSON configuration %s: %s", path, exc)
            return None
    else:
        yaml = _import_yaml()
        if yaml is None:
            LOGGER.warning("PyYAML is not installed; skipping %s", path)
            return None
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            LOGGER.warning("Ignoring malformed YAML configuration %s: %s", path, exc)
            return None

    if not isinstance(data, dict):
        LOGGER.warning("Configuration %s is not a mapping; ignoring it", path)
        return None
    return {key: value for key, value in data.items() if isinstance(key, str)}


def _import_yaml() -> ModuleType | None:
    # PyYAML ships as the optional ``yaml`` extra
    try:
        import yaml
    except ModuleNotFoundError:
        return None
    return yaml
