"""
Gas policy resolution.

Maps an operation kind and network onto transaction execution limits. The
resolver is a pure function of its inputs: it never fails and never logs.
When the resolved profile is invalid it substitutes a documented safe default
and reports the substitution through GasResolution.
"""

from collections.abc import Mapping
from typing import Any, Optional, Union

from ..config.defaults import GasParams, NetworkParams
from ..config.validation import ConfigValidator
from ..models.transactions import GasProfile, GasResolution, Network, OperationKind

GasOverride = Union[GasProfile, Mapping[str, Any]]


class GasPolicyResolver:
    """Resolves gas profiles from immutable gas and network tables."""

    def __init__(self, gas: Optional[GasParams] = None,
                 networks: Optional[NetworkParams] = None):
        self.gas = gas or GasParams()
        self.networks = networks or NetworkParams()

    def resolve(
        self,
        operation: OperationKind,
        network: Union[Network, str],
        override: Optional[GasOverride] = None
    ) -> GasResolution:
        """
        Resolve the execution profile for one transaction.

        Args:
            operation: Operation being built
            network: Target network
            override: Optional caller-provided profile, full or partial

        Returns:
            GasResolution whose profile always satisfies the hard minimums
        """
        reasons: list[str] = []

        expiration = self._resolve_expiration(network, reasons)

        candidate = self._table_profile(operation, reasons)
        if override is not None:
            candidate.update(self._override_fields(override))
        candidate["expiration_offset_seconds"] = candidate.get(
            "expiration_offset_seconds", expiration
        )

        errors = ConfigValidator.validate_gas_profile(
            candidate,
            min_execution_units=self.gas.min_execution_units,
            min_unit_price=self.gas.min_unit_price,
        )
        if errors:
            reasons.extend(f"{error.field}: {error.message} (got: {error.value})" for error in errors)
            return GasResolution(
                profile=self.safe_default(expiration),
                substituted=True,
                reasons=tuple(reasons),
            )

        return GasResolution(
            profile=GasProfile(
                max_execution_units=candidate["max_execution_units"],
                unit_price=candidate["unit_price"],
                expiration_offset_seconds=candidate["expiration_offset_seconds"],
            ),
            substituted=bool(reasons),
            reasons=tuple(reasons),
        )

    def safe_default(self, expiration_offset_seconds: Optional[int] = None) -> GasProfile:
        """Safe fallback profile, clamped to the floors even if misconfigured."""
        expiration = expiration_offset_seconds or self.gas.safe_expiration_offset_seconds
        return GasProfile(
            max_execution_units=max(self.gas.safe_max_execution_units, self.gas.min_execution_units),
            unit_price=max(self.gas.safe_unit_price, self.gas.min_unit_price),
            expiration_offset_seconds=max(1, expiration),
        )

    def _resolve_expiration(self, network: Union[Network, str], reasons: list[str]) -> int:
        name = network.value if isinstance(network, Network) else str(network).lower()
        offsets = self.networks.expiration_offsets

        offset = offsets.get(name)
        if offset is None:
            fallback = self.networks.default_network
            reasons.append(f"Unknown network '{name}', using {fallback} expiration window")
            offset = offsets.get(fallback)

        if not isinstance(offset, int) or isinstance(offset, bool) or offset <= 0:
            reasons.append(f"Invalid expiration window for '{name}', using safe default")
            return self.gas.safe_expiration_offset_seconds

        return offset

    def _table_profile(self, operation: OperationKind, reasons: list[str]) -> dict[str, Any]:
        profile_name = self.gas.operation_profiles.get(operation.value)
        profile = self.gas.profiles.get(profile_name) if profile_name else None

        if profile is None:
            reasons.append(f"No gas profile configured for '{operation.value}'")
            return {}

        return dict(profile)

    @staticmethod
    def _override_fields(override: GasOverride) -> dict[str, Any]:
        if isinstance(override, GasProfile):
            return override.to_dict()
        return {
            key: override[key]
            for key in ("max_execution_units", "unit_price", "expiration_offset_seconds")
            if key in override
        }


_default_resolver = GasPolicyResolver()


def resolve_gas_profile(
    operation: OperationKind,
    network: Union[Network, str] = Network.TESTNET,
    override: Optional[GasOverride] = None
) -> GasResolution:
    """Resolve with the default tables."""
    return _default_resolver.resolve(operation, network, override)
