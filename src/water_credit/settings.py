"""Environment-backed settings primitives for :mod:`water_credit`."""

from __future__ import annotations

import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["DEFAULT_ADMIN", "WaterCreditSettings", "get_settings"]

DEFAULT_ADMIN = "ST1ADMIN11111111111111111111111111111111"


class WaterCreditSettings(BaseSettings):
    """Expose environment-derived configuration knobs for the ledger.

    All environment lookups go through this class. Malformed values fall back
    to the field default instead of failing start-up.

    Attributes:
        admin: Identity installed as administrator of a fresh ledger.
        authorities: Genesis minting authorities, comma separated in the
            environment.
        max_amount: Optional ceiling on a single mint/burn/transfer amount.
        enforce_sender_match: When ``True`` the dispatcher rejects transfers
            whose declared sender differs from the authenticated caller.
        log_level: Name of the logging level used by the CLI.
        config_path: Explicit path to a structured configuration file.
    """

    admin: str = Field(default=DEFAULT_ADMIN, alias="WATER_CREDIT_ADMIN")
    authorities_raw: str | None = Field(
        default=None, alias="WATER_CREDIT_AUTHORITIES"
    )
    max_amount: int | None = Field(default=None, alias="WATER_CREDIT_MAX_AMOUNT")
    enforce_sender_match: bool = Field(
        default=True, alias="WATER_CREDIT_ENFORCE_SENDER"
    )
    log_level: str = Field(default="WARNING", alias="WATER_CREDIT_LOG_LEVEL")
    config_path: str | None = Field(default=None, alias="WATER_CREDIT_CONFIG")

    model_config = SettingsConfigDict(env_file=None, extra="ignore")

    @field_validator("admin", mode="before")
    @classmethod
    def _parse_admin(cls, value: object) -> str:
        if isinstance(value, str) and value.strip():
            return value.strip()
        return DEFAULT_ADMIN

    @field_validator("max_amount", mode="before")
    @classmethod
    def _parse_optional_int(cls, value: object) -> int | None:
        """Parse the optional amount ceiling while tolerating malformed input.

        Args:
            value: Raw environment value.

        Returns:
            Positive integer when conversion succeeds, otherwise ``None``.
        """

        parsed: int | None = None
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            parsed = value
        elif isinstance(value, str):
            try:
                parsed = int(value.strip())
            except ValueError:
                return None
        if parsed is None or parsed < 1:
            return None
        return parsed

    @field_validator("enforce_sender_match", mode="before")
    @classmethod
    def _parse_bool(cls, value: object) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in {"false", "0", "no", "off"}:
                return False
        return True

    @field_validator("log_level", mode="before")
    @classmethod
    def _parse_log_level(cls, value: object) -> str:
        if isinstance(value, str):
            candidate = value.strip().upper()
            if isinstance(logging.getLevelName(candidate), int):
                return candidate
        return "WARNING"

    @property
    def authorities(self) -> tuple[str, ...]:
        """Return the genesis authorities parsed from the comma separated list.

        Returns:
            Tuple of non-empty, de-duplicated identities in input order.
        """

        if not self.authorities_raw:
            return ()
        seen: dict[str, None] = {}
        for item in self.authorities_raw.split(","):
            stripped = item.strip()
            if stripped:
                seen.setdefault(stripped, None)
        return tuple(seen)

    @property
    def log_level_number(self) -> int:
        """Return :attr:`log_level` as a numeric :mod:`logging` level."""

        level = logging.getLevelName(self.log_level)
        return level if isinstance(level, int) else logging.WARNING


def get_settings() -> WaterCreditSettings:
    """Return a :class:`WaterCreditSettings` instance.

    Returns:
        Settings parsed from environment variables.
    """

    return WaterCreditSettings()
