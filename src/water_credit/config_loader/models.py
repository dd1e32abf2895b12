"""Typed configuration dataclasses for :mod:`water_credit.config_loader`."""

from __future__ import annotations

from dataclasses import dataclass, field

from water_credit.ledger import TokenLedger
from water_credit.settings import DEFAULT_ADMIN


@dataclass(slots=True)
class GenesisSettings:
    """Initial state of a freshly constructed ledger.

    Attributes:
        admin: Administrator identity.
        authorities: Minting authorities installed at construction.
    """

    admin: str = DEFAULT_ADMIN
    authorities: tuple[str, ...] = ()


@dataclass(slots=True)
class LimitsSettings:
    """Amount limits enforced by the ledger."""

    max_amount: int | None = None


@dataclass(slots=True)
class DispatchSettings:
    """Controls for the operation dispatcher."""

    enforce_sender_match: bool = True


@dataclass(slots=True)
class LoggingSettings:
    """Logging verbosity and output format."""

    level: str = "WARNING"
    json: bool = False


@dataclass(slots=True)
class LedgerConfig:
    """Strongly typed configuration container for the water credit ledger."""

    genesis: GenesisSettings = field(default_factory=GenesisSettings)
    limits: LimitsSettings = field(default_factory=LimitsSettings)
    dispatch: DispatchSettings = field(default_factory=DispatchSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    def build_ledger(self) -> TokenLedger:
        """Construct an empty :class:`TokenLedger` from the genesis section."""

        return TokenLedger(
            self.genesis.admin,
            authorities=self.genesis.authorities,
            max_amount=self.limits.max_amount,
        )
