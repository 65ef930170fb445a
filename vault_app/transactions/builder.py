"""
Transaction builder for VaultFactory entry functions.

Turns an operation name and its arguments into a fully specified ContractCall:
module-qualified target function, canonical ordered arguments and the
resolved gas profile. Argument shape mismatches are internal defects and are
raised as MalformedArgumentsError, never corrected.
"""

from collections.abc import Mapping
from decimal import ROUND_DOWN, Decimal
from types import MappingProxyType
from typing import Any, Optional, Sequence, Union

from ..config.defaults import ContractParams
from ..errors.system_failures import MalformedArgumentsError
from ..gas.policy import GasOverride, GasPolicyResolver
from ..models.transactions import (
    MAX_SIGNAL_VALUE,
    OPERATION_ARGUMENTS,
    ArgumentKind,
    ContractCall,
    Network,
    OperationKind,
)
from ..utils.formats import canonical_address, is_hex_address, parse_decimal

FUNCTION_NAMES: Mapping[OperationKind, str] = MappingProxyType({
    OperationKind.CREATE: "create_vault",
    OperationKind.JOIN: "join_vault",
    OperationKind.LEAVE: "leave_vault",
    OperationKind.DEPOSIT: "deposit",
    OperationKind.WITHDRAW: "withdraw",
    OperationKind.PUBLISH_SIGNAL: "publish_signal",
    OperationKind.EXECUTE_TRADE: "execute_trade",
    OperationKind.PAUSE: "pause_vault",
    OperationKind.RESUME: "resume_vault",
    OperationKind.UPDATE_LEADER: "update_leader",
})


class FunctionRegistry:
    """Static registry of module-qualified target functions."""

    def __init__(self, contract: Optional[ContractParams] = None,
                 function_names: Mapping[OperationKind, str] = FUNCTION_NAMES):
        self.contract = contract or ContractParams()
        self.function_names = function_names

    def target_function(self, operation: OperationKind) -> str:
        name = self.function_names.get(operation)
        if name is None:
            raise MalformedArgumentsError(
                f"No contract function registered for '{operation.value}'",
                operation=operation.value
            )
        return f"{self.contract.module_address}::{self.contract.module_name}::{name}"


class TransactionBuilder:
    """Builds immutable contract calls for vault operations."""

    def __init__(
        self,
        registry: Optional[FunctionRegistry] = None,
        gas_resolver: Optional[GasPolicyResolver] = None,
        amount_decimals: int = 8
    ):
        self.registry = registry or FunctionRegistry()
        self.gas_resolver = gas_resolver or GasPolicyResolver()
        self.amount_decimals = amount_decimals

    def build(
        self,
        operation: OperationKind,
        args: Sequence[Any],
        network: Union[Network, str],
        gas_override: Optional[GasOverride] = None
    ) -> ContractCall:
        """
        Build a contract call.

        Args:
            operation: Operation to build
            args: Arguments in on-chain order (addresses, amounts, signals)
            network: Target network for the gas profile
            gas_override: Optional caller-provided gas profile

        Returns:
            ContractCall with canonical arguments and a valid gas profile

        Raises:
            MalformedArgumentsError: If the arguments do not fit the operation
        """
        if not isinstance(operation, OperationKind):
            raise MalformedArgumentsError(
                f"Unknown operation: {operation!r}",
                operation=str(operation)
            )

        schema = OPERATION_ARGUMENTS[operation]
        received = list(args)
        if len(received) != len(schema):
            raise MalformedArgumentsError(
                f"{operation.value} expects {len(schema)} argument(s), got {len(received)}",
                operation=operation.value,
                expected_arity=len(schema),
                received=received
            )

        arguments = tuple(
            self._encode_argument(operation, position, kind, value)
            for position, (kind, value) in enumerate(zip(schema, received))
        )

        resolution = self.gas_resolver.resolve(operation, network, gas_override)

        return ContractCall(
            operation=operation,
            target_function=self.registry.target_function(operation),
            arguments=arguments,
            gas_profile=resolution.profile,
            gas_substituted=resolution.substituted,
            gas_notes=resolution.reasons,
        )

    def to_base_units(self, amount: Decimal) -> int:
        """Scale a decimal amount to integer base units, rounding toward zero."""
        scaled = amount * (Decimal(10) ** self.amount_decimals)
        return int(scaled.to_integral_value(rounding=ROUND_DOWN))

    def _encode_argument(self, operation: OperationKind, position: int,
                         kind: ArgumentKind, value: Any) -> Any:
        if kind == ArgumentKind.ADDRESS:
            if not is_hex_address(value):
                raise self._malformed(operation, position, "address", value)
            return canonical_address(value)

        if kind == ArgumentKind.AMOUNT:
            amount = parse_decimal(value)
            base_units = self.to_base_units(amount) if amount is not None else 0
            if base_units <= 0 or base_units > MAX_SIGNAL_VALUE:
                raise self._malformed(operation, position, "positive amount", value)
            return base_units

        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= MAX_SIGNAL_VALUE:
            raise self._malformed(operation, position, "u64 signal", value)
        return value

    @staticmethod
    def _malformed(operation: OperationKind, position: int,
                   expected: str, value: Any) -> MalformedArgumentsError:
        return MalformedArgumentsError(
            f"{operation.value} argument {position} must be a {expected}, got {value!r}",
            operation=operation.value,
            expected_arity=len(OPERATION_ARGUMENTS[operation]),
            received=[value]
        )
