"""
Operation orchestrator.

The single entry point every UI action calls. Each invocation walks
validate -> build -> (external venue submit) -> sign -> confirm and returns a
TransactionResult; failures are classified into the error taxonomy and never
escape as raw exceptions.

At most one chain-submitting invocation runs per wallet session at a time.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import replace
from decimal import Decimal
from typing import Any, Optional, Sequence, Union

import structlog

from .config.defaults import DefaultConfig, get_default_config
from .data.validators import OperationValidator, parse_amount
from .errors.classifier import ErrorClassifier
from .errors.input_errors import InputError, InputValidationError
from .errors.recovery import retry_operation
from .errors.system_failures import MalformedArgumentsError
from .errors.taxonomy import ClassifiedError, ErrorKind
from .gas.policy import GasOverride, GasPolicyResolver
from .logging.config import get_orchestrator_logger, log_gas_substitution
from .models.trade import TradeMode, TradePayload, TradeSide
from .models.transactions import (
    ChainTransactionState,
    ContractCall,
    MAX_SIGNAL_VALUE,
    Network,
    OperationKind,
    TransactionResult,
    TransactionStatus,
)
from .state.machine import InvocationStateMachine
from .state.models import OrchestratorPhase
from .trading.payload import TradePayloadGenerator, to_onchain_signal
from .trading.venue import BaseVenueClient, HttpVenueClient
from .transactions.builder import FunctionRegistry, TransactionBuilder
from .utils.cancellation import CancellationToken
from .wallet.base import BaseChainClient, BaseWalletSession, ConnectionState

logger = structlog.get_logger(__name__)
orchestrator_logger = get_orchestrator_logger(__name__)


class _Invocation:
    """Per-invocation scratch state; never shared between invocations."""

    def __init__(self, operation: OperationKind, network: str):
        self.operation = operation
        self.network = network
        self.machine = InvocationStateMachine(operation.value)
        self.call: Optional[ContractCall] = None
        self.payload: Optional[TradePayload] = None
        self.transaction_hash: Optional[str] = None


class OperationOrchestrator:
    """
    Coordinates vault operations against an injected wallet session.

    Pipeline:
    Input → Validate → Build → (Venue submit) → Sign → Confirm → Result
    """

    def __init__(
        self,
        chain: BaseChainClient,
        config: Optional[DefaultConfig] = None,
        validator: Optional[OperationValidator] = None,
        builder: Optional[TransactionBuilder] = None,
        classifier: Optional[ErrorClassifier] = None,
        payload_generator: Optional[TradePayloadGenerator] = None,
        venue_client: Optional[BaseVenueClient] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the orchestrator and its components from configuration."""
        self.config = config or get_default_config()
        settings = self.config.orchestrator

        self.chain = chain
        self.validator = validator or OperationValidator(amount_decimals=settings.amount_decimals)
        self.builder = builder or TransactionBuilder(
            registry=FunctionRegistry(self.config.contract),
            gas_resolver=GasPolicyResolver(self.config.gas, self.config.network),
            amount_decimals=settings.amount_decimals,
        )
        self.classifier = classifier or ErrorClassifier()

        if venue_client is None and self.config.venue.api_key:
            venue_client = HttpVenueClient(self.config.venue)
        self.venue_client = venue_client
        self.payload_generator = payload_generator or TradePayloadGenerator(
            venue=self.config.venue,
            venue_client=venue_client,
        )

        self._sleep = sleep
        self._monotonic = monotonic
        self._session_locks: dict[str, asyncio.Lock] = {}
        self._session_users: dict[str, int] = {}

        orchestrator_logger.info(
            "Operation orchestrator initialized",
            network=settings.network,
            venue_configured=venue_client is not None
        )

    async def execute(
        self,
        operation: Union[OperationKind, str],
        args: Sequence[Any],
        session: BaseWalletSession,
        mode: Union[TradeMode, str] = TradeMode.DEMO,
        side: Union[TradeSide, str] = TradeSide.BUY,
        network: Optional[Union[Network, str]] = None,
        gas_override: Optional[GasOverride] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> TransactionResult:
        """
        Run one vault operation end to end.

        Args:
            operation: Operation kind
            args: Operation arguments (addresses, decimal amount strings, signals)
            session: Connected wallet session
            mode: Trade payload mode, used only by execute_trade
            side: Trade side, used only by execute_trade
            network: Overrides the configured network
            gas_override: Optional caller-provided gas profile
            cancel_token: Cooperative cancel switch for the pre-signature phases

        Returns:
            TransactionResult in a terminal phase

        Raises:
            MalformedArgumentsError: If operation is not a known operation kind
        """
        try:
            operation = OperationKind(operation)
        except ValueError as e:
            raise MalformedArgumentsError(
                f"Unknown operation: {operation!r}", operation=str(operation)
            ) from e

        network_name = network.value if isinstance(network, Network) else (
            network or self.config.orchestrator.network
        )
        inv = _Invocation(operation, str(network_name))
        token = cancel_token or CancellationToken()
        trade_mode: Optional[TradeMode] = None
        trade_side: Optional[TradeSide] = None

        # Validating
        inv.machine.transition(OrchestratorPhase.VALIDATING, trigger="execute")
        try:
            token.raise_if_cancelled(OrchestratorPhase.VALIDATING.value)
            caller = self._require_connected(session)
            self.validator.validate(operation, args, caller)
            chain_args = self._chain_arguments(operation, args)
            if operation == OperationKind.EXECUTE_TRADE:
                trade_mode, trade_side = self._trade_options(mode, side)
        except InputError as e:
            return self._fail(inv, e, trigger="validation_failed")

        # Building
        inv.machine.transition(OrchestratorPhase.BUILDING, trigger="validated")
        try:
            inv.call = self.builder.build(operation, chain_args, inv.network, gas_override)
        except MalformedArgumentsError as e:
            logger.error(
                "Transaction builder rejected arguments",
                operation=operation.value,
                error=e.message,
                expected_arity=e.expected_arity
            )
            return self._fail(inv, e, trigger="malformed_arguments")

        if inv.call.gas_substituted:
            log_gas_substitution(
                orchestrator_logger,
                operation=operation.value,
                network=inv.network,
                reasons=inv.call.gas_notes,
                profile=inv.call.gas_profile.to_dict()
            )

        is_trade = operation == OperationKind.EXECUTE_TRADE
        if is_trade and trade_mode == TradeMode.DEMO:
            inv.payload = self.payload_generator.generate_payload(
                args[0], trade_side, trade_mode, caller
            )

        session_id = session.session_id
        lock = self._session_lock(session_id)
        acquired = False
        try:
            try:
                await self._acquire(lock, token)
            except InputError as e:
                return self._fail(inv, e, trigger="cancelled")
            acquired = True

            if is_trade and trade_mode == TradeMode.PRODUCTION:
                failed = await self._submit_externally(inv, args[0], trade_side, caller, token)
                if failed is not None:
                    return failed

            return await self._sign_and_confirm(inv, session, token)
        finally:
            if acquired:
                lock.release()
            self._release_session(session_id)

    async def execute_with_retry(
        self,
        operation: Union[OperationKind, str],
        args: Sequence[Any],
        session: BaseWalletSession,
        **kwargs: Any
    ) -> TransactionResult:
        """
        Same as execute(), retrying retry-eligible failures with linear backoff.

        User rejections, cancellations, validation and definitive chain answers
        are returned after the first attempt. A production trade whose venue
        order was already placed is never retried, since another attempt would
        place a second order.
        """
        settings = self.config.orchestrator
        return await retry_operation(
            lambda: self.execute(operation, args, session, **kwargs),
            max_attempts=settings.retry_max_attempts,
            delay_seconds=settings.retry_delay_seconds,
            sleep=self._sleep,
            should_retry=self._may_repeat,
        )

    @staticmethod
    def _may_repeat(result: TransactionResult) -> bool:
        payload = result.trade_payload
        if payload is not None and payload.mode == TradeMode.PRODUCTION and payload.venue_order_id:
            logger.warning(
                "Venue order already placed; not retrying",
                operation=result.operation.value,
                venue_order_id=payload.venue_order_id
            )
            return False
        return True

    async def _submit_externally(
        self,
        inv: _Invocation,
        amount: Any,
        side: Union[TradeSide, str],
        caller: str,
        token: CancellationToken
    ) -> Optional[TransactionResult]:
        """Place the venue order; a failure here prevents any on-chain signal."""
        inv.machine.transition(OrchestratorPhase.EXTERNAL_SUBMIT, trigger="production_trade")
        try:
            token.raise_if_cancelled(OrchestratorPhase.EXTERNAL_SUBMIT.value)
            inv.payload = self.payload_generator.generate_payload(
                amount, side, TradeMode.PRODUCTION, caller
            )
            order = await self.payload_generator.submit_externally(inv.payload)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(
                "External venue submission failed; on-chain signal not published",
                operation=inv.operation.value,
                error=str(e)
            )
            return self._fail(inv, e, trigger="venue_submission_failed")

        inv.payload = replace(inv.payload, venue_order_id=order.order_id)
        return None

    async def _sign_and_confirm(
        self,
        inv: _Invocation,
        session: BaseWalletSession,
        token: CancellationToken
    ) -> TransactionResult:
        assert inv.call is not None

        try:
            token.raise_if_cancelled(OrchestratorPhase.AWAITING_SIGNATURE.value)
        except InputError as e:
            return self._fail(inv, e, trigger="cancelled")

        # AwaitingSignature
        inv.machine.transition(OrchestratorPhase.AWAITING_SIGNATURE, trigger="ready_to_sign")
        try:
            submitted = await session.sign_and_submit(inv.call)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            return self._fail(inv, e, trigger="signature_failed", submitted=False)

        if not submitted.hash:
            return self._fail(inv, "Wallet did not return a transaction hash",
                              trigger="missing_hash")
        inv.transaction_hash = submitted.hash

        # AwaitingConfirmation
        inv.machine.transition(
            OrchestratorPhase.AWAITING_CONFIRMATION,
            trigger="submitted",
            context={"transaction_hash": submitted.hash}
        )
        return await self._await_confirmation(inv)

    async def _await_confirmation(self, inv: _Invocation) -> TransactionResult:
        assert inv.call is not None and inv.transaction_hash is not None
        window = inv.call.gas_profile.expiration_offset_seconds
        deadline = self._monotonic() + window
        poll_interval = self.config.orchestrator.confirmation_poll_interval_seconds

        while True:
            remaining = deadline - self._monotonic()
            if remaining <= 0:
                return self._expired(inv, window)

            try:
                status = await asyncio.wait_for(
                    self.chain.wait_for_transaction(inv.transaction_hash),
                    timeout=remaining
                )
            except asyncio.TimeoutError:
                return self._expired(inv, window)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                # The transaction may still land; keep polling until the window closes
                logger.warning(
                    "Confirmation poll failed",
                    transaction_hash=inv.transaction_hash,
                    error=str(e)
                )
                await self._sleep(min(poll_interval, max(0.0, remaining)))
                continue

            if status.state == ChainTransactionState.SUCCESS:
                inv.machine.transition(OrchestratorPhase.CONFIRMED, trigger="chain_success")
                return self._result(inv, TransactionStatus.CONFIRMED)

            if status.state == ChainTransactionState.FAILED:
                return self._fail(
                    inv, status.vm_status or "Transaction failed on chain",
                    trigger="chain_failure"
                )

            await self._sleep(min(poll_interval, max(0.0, deadline - self._monotonic())))

    def _expired(self, inv: _Invocation, window: int) -> TransactionResult:
        inv.machine.transition(
            OrchestratorPhase.EXPIRED,
            trigger="confirmation_window_elapsed",
            context={"window_seconds": window}
        )
        error = ClassifiedError(
            kind=ErrorKind.EXPIRED,
            message=(
                f"Transaction was not confirmed within {window}s. "
                "It may still land; check the transaction hash before retrying."
            ),
        )
        return self._result(inv, TransactionStatus.SUBMITTED, error=error)

    def _fail(
        self,
        inv: _Invocation,
        raw_error: Any,
        trigger: str,
        submitted: bool = True
    ) -> TransactionResult:
        classified = self.classifier.classify(raw_error, submitted=submitted)
        inv.machine.fail(trigger, context={"error_kind": classified.kind.value})
        return self._result(inv, TransactionStatus.FAILED, error=classified)

    def _result(
        self,
        inv: _Invocation,
        status: TransactionStatus,
        error: Optional[ClassifiedError] = None
    ) -> TransactionResult:
        return TransactionResult(
            operation=inv.operation,
            status=status,
            phase=inv.machine.phase.value,
            transaction_hash=inv.transaction_hash,
            error=error,
            gas_substituted=inv.call.gas_substituted if inv.call else False,
            trade_payload=inv.payload,
            venue_order_id=inv.payload.venue_order_id if inv.payload else None,
            metadata={"invocation_id": inv.machine.invocation_id, "network": inv.network},
        )

    @staticmethod
    def _require_connected(session: BaseWalletSession) -> str:
        account = session.account
        if session.state != ConnectionState.CONNECTED or account is None:
            raise InputValidationError("Please connect your wallet first", field="session")
        return account.address

    def _chain_arguments(self, operation: OperationKind, args: Sequence[Any]) -> list[Any]:
        """Convert validated user input to the on-chain argument shape."""
        chain_args = list(args)

        if operation == OperationKind.PUBLISH_SIGNAL and chain_args:
            value = chain_args[0]
            chain_args[0] = int(value.strip()) if isinstance(value, str) else value

        elif operation == OperationKind.EXECUTE_TRADE and chain_args:
            amount = parse_amount(chain_args[0])
            scale = self.config.orchestrator.trade_signal_scale
            signal = to_onchain_signal(amount, scale) if amount is not None else 0
            if signal <= 0:
                raise InputValidationError(
                    f"Trade amount is too small; minimum is {Decimal(1) / scale}",
                    field="amount",
                    value=chain_args[0]
                )
            if signal > MAX_SIGNAL_VALUE:
                raise InputValidationError(
                    f"Trade amount is too large; maximum is {Decimal(MAX_SIGNAL_VALUE) / scale}",
                    field="amount",
                    value=chain_args[0]
                )
            chain_args[0] = signal

        return chain_args

    @staticmethod
    def _trade_options(
        mode: Union[TradeMode, str],
        side: Union[TradeSide, str]
    ) -> tuple[TradeMode, TradeSide]:
        try:
            trade_mode = TradeMode(mode)
        except ValueError:
            raise InputValidationError(
                "Trade mode must be demo or production", field="mode", value=mode
            ) from None
        try:
            trade_side = TradeSide(side)
        except ValueError:
            raise InputValidationError(
                "Trade side must be buy or sell", field="side", value=side
            ) from None
        return trade_mode, trade_side

    def _session_lock(self, session_id: str) -> asyncio.Lock:
        lock = self._session_locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._session_locks[session_id] = lock
        self._session_users[session_id] = self._session_users.get(session_id, 0) + 1
        return lock

    def _release_session(self, session_id: str) -> None:
        """Drop the session lock once no invocation holds or awaits it."""
        remaining = self._session_users.get(session_id, 1) - 1
        if remaining > 0:
            self._session_users[session_id] = remaining
            return
        self._session_users.pop(session_id, None)
        self._session_locks.pop(session_id, None)

    @staticmethod
    async def _acquire(lock: asyncio.Lock, token: CancellationToken) -> None:
        """Acquire the session lock unless the user cancels while waiting."""
        token.raise_if_cancelled("waiting_for_session")
        if not lock.locked():
            await lock.acquire()
            return

        acquire_task = asyncio.ensure_future(lock.acquire())
        cancel_task = asyncio.ensure_future(token.wait())
        try:
            await asyncio.wait({acquire_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            cancel_task.cancel()

        if acquire_task.done() and not acquire_task.cancelled():
            if token.cancelled:
                lock.release()
                token.raise_if_cancelled("waiting_for_session")
            return

        acquire_task.cancel()
        token.raise_if_cancelled("waiting_for_session")

    # Operation surface

    async def create_vault(self, session: BaseWalletSession, **kwargs: Any) -> TransactionResult:
        """Create a vault owned by the connected account."""
        return await self.execute(OperationKind.CREATE, [], session, **kwargs)

    async def join_vault(self, session: BaseWalletSession, leader: str,
                         **kwargs: Any) -> TransactionResult:
        """Subscribe to another leader's vault."""
        return await self.execute(OperationKind.JOIN, [leader], session, **kwargs)

    async def leave_vault(self, session: BaseWalletSession, leader: str,
                          **kwargs: Any) -> TransactionResult:
        """Unsubscribe from a leader's vault."""
        return await self.execute(OperationKind.LEAVE, [leader], session, **kwargs)

    async def deposit(self, session: BaseWalletSession, amount: str,
                      **kwargs: Any) -> TransactionResult:
        return await self.execute(OperationKind.DEPOSIT, [amount], session, **kwargs)

    async def withdraw(self, session: BaseWalletSession, amount: str,
                       **kwargs: Any) -> TransactionResult:
        return await self.execute(OperationKind.WITHDRAW, [amount], session, **kwargs)

    async def publish_signal(self, session: BaseWalletSession, signal: Union[int, str],
                             **kwargs: Any) -> TransactionResult:
        return await self.execute(OperationKind.PUBLISH_SIGNAL, [signal], session, **kwargs)

    async def execute_trade(
        self,
        session: BaseWalletSession,
        amount: str,
        side: Union[TradeSide, str] = TradeSide.BUY,
        mode: Union[TradeMode, str] = TradeMode.DEMO,
        **kwargs: Any
    ) -> TransactionResult:
        """
        Publish a trade signal on chain, with a venue order in production mode.

        The venue order is placed first; if it fails no signal is published.
        """
        return await self.execute(
            OperationKind.EXECUTE_TRADE, [amount], session, mode=mode, side=side, **kwargs
        )

    async def pause_vault(self, session: BaseWalletSession, **kwargs: Any) -> TransactionResult:
        return await self.execute(OperationKind.PAUSE, [], session, **kwargs)

    async def resume_vault(self, session: BaseWalletSession, **kwargs: Any) -> TransactionResult:
        return await self.execute(OperationKind.RESUME, [], session, **kwargs)

    async def update_leader(self, session: BaseWalletSession, new_leader: str,
                            **kwargs: Any) -> TransactionResult:
        """Hand vault leadership to another address."""
        return await self.execute(OperationKind.UPDATE_LEADER, [new_leader], session, **kwargs)

    async def close(self) -> None:
        """Release the venue client's network resources."""
        if self.venue_client is not None:
            await self.venue_client.close()
