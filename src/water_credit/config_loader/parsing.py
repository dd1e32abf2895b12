"""Parsing and transformation helpers for :mod:`water_credit.config_loader`."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import replace

from water_credit.config_loader.models import LedgerConfig
from water_credit.settings import WaterCreditSettings


def apply_environment_overrides(
    config: LedgerConfig, settings: WaterCreditSettings
) -> LedgerConfig:
    """Apply environment-derived overrides to the configuration.

    Args:
        config: Base configuration instance.
        settings: Environment-derived settings.

    Returns:
        Configuration with environment overrides applied.
    """

    genesis = replace(config.genesis, admin=settings.admin)
    if settings.authorities:
        genesis = replace(genesis, authorities=settings.authorities)

    updated = replace(
        config,
        genesis=genesis,
        dispatch=replace(
            config.dispatch, enforce_sender_match=settings.enforce_sender_match
        ),
        logging=replace(config.logging, level=settings.log_level),
    )
    if settings.max_amount is not None:
        updated = replace(
            updated, limits=replace(updated.limits, max_amount=settings.max_amount)
        )
    return updated


def apply_structured_overrides(
    config: LedgerConfig, data: Mapping[str, object]
) -> LedgerConfig:
    """Apply overrides sourced from structured configuration data.

    Unknown sections and values of the wrong type are ignored.

    Args:
        config: Base configuration instance.
        data: Mapping parsed from configuration file.

    Returns:
        Configuration updated according to the provided mapping.
    """

    updated = config

    genesis_section = _expect_mapping(data.get("genesis"))
    if genesis_section is not None:
        updated = _apply_genesis_section(updated, genesis_section)

    limits_section = _expect_mapping(data.get("limits"))
    if limits_section is not None:
        updated = _apply_limits_section(updated, limits_section)

    dispatch_section = _expect_mapping(data.get("dispatch"))
    if dispatch_section is not None:
        enforce = _coerce_bool(dispatch_section.get("enforce_sender_match"))
        if enforce is not None:
            updated = replace(
                updated,
                dispatch=replace(updated.dispatch, enforce_sender_match=enforce),
            )

    logging_section = _expect_mapping(data.get("logging"))
    if logging_section is not None:
        updated = _apply_logging_section(updated, logging_section)

    return updated


def _apply_genesis_section(
    config: LedgerConfig, section: Mapping[str, object]
) -> LedgerConfig:
    genesis = config.genesis

    admin = _coerce_str(section.get("admin"))
    if admin is not None:
        genesis = replace(genesis, admin=admin)

    authorities = _coerce_str_sequence(section.get("authorities"))
    if authorities is not None:
        genesis = replace(genesis, authorities=authorities)

    return replace(config, genesis=genesis)


def _apply_limits_section(
    config: LedgerConfig, section: Mapping[str, object]
) -> LedgerConfig:
    """Apply amount limits from a structured section.

    ``max_amount: null`` explicitly lifts a ceiling set through the
    environment; non-positive or non-integer values are ignored.
    """

    if "max_amount" not in section:
        return config
    raw = section.get("max_amount")
    if raw is None:
        return replace(config, limits=replace(config.limits, max_amount=None))
    value = _coerce_int(raw)
    if value is None or value < 1:
        return config
    return replace(config, limits=replace(config.limits, max_amount=value))


def _apply_logging_section(
    config: LedgerConfig, section: Mapping[str, object]
) -> LedgerConfig:
    log_config = config.logging

    level = _coerce_str(section.get("level"))
    if level is not None and isinstance(logging.getLevelName(level.upper()), int):
        log_config = replace(log_config, level=level.upper())

    json_output = _coerce_bool(section.get("json"))
    if json_output is not None:
        log_config = replace(log_config, json=json_output)

    return replace(config, logging=log_config)


def _coerce_int(value: object) -> int | None:
    """Parse an integer from arbitrary input.

    Args:
        value: Raw value.

    Returns:
        Parsed integer when conversion succeeds, otherwise ``None``.
    """

    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _coerce_bool(value: object) -> bool | None:
    """Parse a boolean from arbitrary input.

    Args:
        value: Raw value.

    Returns:
        Parsed boolean when conversion succeeds, otherwise ``None``.
    """

    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "1", "yes"}:
            return True
        if lowered in {"false", "0", "no"}:
            return False
    if isinstance(value, (int, float)):
        if value == 0:
            return False
        if value == 1:
            return True
    return None


def _coerce_str(value: object) -> str | None:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return None


def _coerce_str_sequence(value: object) -> tuple[str, ...] | None:
    """Parse a tuple of identities from an arbitrary sequence.

    Args:
        value: Raw sequence value.

    Returns:
        Tuple of stripped, de-duplicated strings when every element is a
        non-empty string, otherwise ``None``.
    """

    if not isinstance(value, Sequence) or isinstance(value, (str, bytes)):
        return None
    items: dict[str, None] = {}
    for element in value:
        text = _coerce_str(element)
        if text is None:
            return None
        items.setdefault(text, None)
    return tuple(items)


def _expect_mapping(value: object) -> Mapping[str, object] | None:
    """Return the value when it is a mapping with string keys.

    Args:
        value: Raw configuration value.

    Returns:
        Mapping with string keys suitable for further parsing, or ``None``.
    """

    if not isinstance(value, Mapping):
        return None
    if not all(isinstance(key, str) for key in value.keys()):
        return None
    return value
