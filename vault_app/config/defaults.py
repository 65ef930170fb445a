"""Default configuration parameters for the vault orchestration layer."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Optional


def _frozen(mapping: Mapping) -> Mapping:
    return MappingProxyType({
        key: _frozen(value) if isinstance(value, Mapping) else value
        for key, value in mapping.items()
    })


@dataclass(frozen=True)
class ContractParams:
    """On-chain module the vault functions live in."""
    module_address: str = "0xf02e42e167e86430855e112267405f0bb4bb6a8fed16cd7e4e4a339ec7341f73"
    module_name: str = "VaultFactory"


@dataclass(frozen=True)
class GasParams:
    """Per-operation execution budgets and hard floors."""
    # Chain rejects anything below these
    min_execution_units: int = 1000
    min_unit_price: int = 1

    # Substituted when a resolved profile is invalid
    safe_max_execution_units: int = 20000
    safe_unit_price: int = 100
    safe_expiration_offset_seconds: int = 30

    profiles: Mapping[str, Mapping[str, int]] = field(default_factory=lambda: {
        "vault_creation": {"max_execution_units": 20000, "unit_price": 100},
        "vault_operations": {"max_execution_units": 15000, "unit_price": 100},
        "simple_transactions": {"max_execution_units": 10000, "unit_price": 100},
        "complex_trading": {"max_execution_units": 25000, "unit_price": 100},
    })

    operation_profiles: Mapping[str, str] = field(default_factory=lambda: {
        "create": "vault_creation",
        "join": "vault_operations",
        "leave": "vault_operations",
        "deposit": "vault_operations",
        "withdraw": "vault_operations",
        "publish_signal": "vault_operations",
        "update_leader": "vault_operations",
        "execute_trade": "complex_trading",
        "pause": "simple_transactions",
        "resume": "simple_transactions",
    })

    def __post_init__(self) -> None:
        object.__setattr__(self, "profiles", _frozen(self.profiles))
        object.__setattr__(self, "operation_profiles", _frozen(self.operation_profiles))


@dataclass(frozen=True)
class NetworkParams:
    """Per-network transaction expiration windows."""
    default_network: str = "testnet"
    expiration_offsets: Mapping[str, int] = field(default_factory=lambda: {
        "testnet": 30,
        "mainnet": 30,
        "devnet": 30,
    })

    def __post_init__(self) -> None:
        object.__setattr__(self, "expiration_offsets", _frozen(self.expiration_offsets))


@dataclass(frozen=True)
class VenueParams:
    """External trading venue used for production-mode orders."""
    base_url: str = "https://api.merkle.trade"
    order_path: str = "/v1/trade"
    market: str = "BTC_USD"
    collateral: float = 1.0
    timeout_seconds: int = 30
    demo_price: float = 50000.0
    api_key: Optional[str] = None                   # Never logged


@dataclass(frozen=True)
class OrchestratorParams:
    """Operation orchestrator behaviour."""
    network: str = "testnet"
    confirmation_poll_interval_seconds: float = 1.0
    trade_signal_scale: int = 100                    # On-chain signal = amount * scale
    amount_decimals: int = 8                         # Base units per whole token (octas)
    retry_max_attempts: int = 3
    retry_delay_seconds: float = 1.0


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    contract: ContractParams
    gas: GasParams
    network: NetworkParams
    venue: VenueParams
    orchestrator: OrchestratorParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        contract=ContractParams(),
        gas=GasParams(),
        network=NetworkParams(),
        venue=VenueParams(),
        orchestrator=OrchestratorParams(),
    )
