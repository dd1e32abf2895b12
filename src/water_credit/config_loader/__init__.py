"""Public entry points for the :mod:`water_credit` configuration loader."""

from __future__ import annotations

from water_credit.config_loader.models import (
    DispatchSettings,
    GenesisSettings,
    LedgerConfig,
    LimitsSettings,
    LoggingSettings,
)
from water_credit.config_loader.parsing import (
    apply_environment_overrides,
    apply_structured_overrides,
)
from water_credit.config_loader.sources import load_structured_config
from water_credit.settings import WaterCreditSettings, get_settings

__all__ = [
    "DispatchSettings",
    "GenesisSettings",
    "LedgerConfig",
    "LimitsSettings",
    "LoggingSettings",
    "load_config",
]


def load_config(
    path: str | None = None, *, settings: WaterCreditSettings | None = None
) -> LedgerConfig:
    """Load configuration from environment and optional file sources.

    Precedence, lowest first: dataclass defaults, environment variables, the
    structured configuration file.

    Args:
        path: Optional explicit path to a configuration file. When omitted the
            loader inspects ``WATER_CREDIT_CONFIG`` and default search
            locations.
        settings: Optional pre-instantiated environment settings. When omitted
            :func:`water_credit.settings.get_settings` is used.

    Returns:
        Fully populated :class:`LedgerConfig` instance.
    """

    env_settings = settings or get_settings()
    base = apply_environment_overrides(LedgerConfig(), env_settings)
    structured = load_structured_config(path, env_settings)
    if structured is None:
        return base
    return apply_structured_overrides(base, structured)
