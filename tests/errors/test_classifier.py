"""Tests for raw failure classification."""

import pytest

from vault_app.errors import (
    ConfigurationMissingError,
    ErrorClassifier,
    ErrorKind,
    InputValidationError,
    VenueSubmissionError,
    classify,
)
from vault_app.errors.classifier import CONTRACT_ERROR_CODES, truncate_message


class TestContractCodes:
    """Test contract abort code matching."""

    @pytest.mark.parametrize("code,message", sorted(CONTRACT_ERROR_CODES.items()))
    def test_every_code(self, code: int, message: str) -> None:
        """Test each code maps to its precise reason."""
        result = classify(f"Move abort in VaultFactory: code {code}")

        assert result.kind == ErrorKind.CONTRACT_REJECTED
        assert result.message == message
        assert result.code == code

    def test_duplicate_vault(self) -> None:
        """Test the vault-exists abort."""
        result = classify(RuntimeError("execution failed: ABORTED 1008"))
        assert result.message == "Vault already exists for this address"

    def test_code_precedes_substrings(self) -> None:
        """Test codes win over generic substrings in the same text."""
        result = classify("insufficient gas, network error, abort 1002")
        assert result.kind == ErrorKind.CONTRACT_REJECTED
        assert result.message == "Insufficient balance"

    def test_code_inside_hex_ignored(self) -> None:
        """Test digits embedded in longer tokens do not match."""
        result = classify("abort at 0xab1001cd")
        assert result.kind == ErrorKind.UNKNOWN

    def test_mapping_input(self) -> None:
        """Test dict-shaped chain responses are read."""
        result = classify({"vm_status": "Move abort: 1005"})
        assert result.message == "Vault is currently paused"


class TestSubstringRules:
    """Test generic substring matching."""

    @pytest.mark.parametrize("text,kind", [
        ("INSUFFICIENT_BALANCE_FOR_TRANSACTION_FEE", ErrorKind.INSUFFICIENT_FUNDS),
        ("MAX_GAS_UNITS_BELOW_MIN_TRANSACTION_GAS_UNITS", ErrorKind.GAS_MISCONFIGURED),
        ("SEQUENCE_NUMBER_TOO_OLD", ErrorKind.STALE_SEQUENCE),
        ("Transaction timed out", ErrorKind.EXPIRED),
        ("User rejected the request", ErrorKind.USER_REJECTED),
        ("Permission denied by wallet", ErrorKind.USER_REJECTED),
        ("Failed to fetch", ErrorKind.NETWORK_FAULT),
    ])
    def test_kinds(self, text: str, kind: ErrorKind) -> None:
        assert classify(text).kind == kind

    def test_rule_order(self) -> None:
        """Test the first matching rule wins."""
        assert classify("insufficient gas").kind == ErrorKind.INSUFFICIENT_FUNDS
        assert classify("gas estimate expired").kind == ErrorKind.GAS_MISCONFIGURED

    def test_messages(self) -> None:
        assert classify("User rejected").message == "Transaction was rejected by user"
        assert classify("connection reset").message == "Network error. Please check your connection."

    @pytest.mark.parametrize("text", ["Request timed out", "wallet timeout after 60s"])
    def test_timeout_before_submission(self, text: str) -> None:
        """Test timeouts before anything was submitted are network faults."""
        result = classify(TimeoutError(text), submitted=False)

        assert result.kind == ErrorKind.NETWORK_FAULT
        assert result.message == "Wallet request timed out. Please try again."
        assert classify(text).kind == ErrorKind.EXPIRED

    def test_expiry_before_submission_kept(self) -> None:
        """Test an explicit expiry from the wallet is still Expired."""
        result = classify("USER_TRANSACTION_EXPIRED", submitted=False)
        assert result.kind == ErrorKind.EXPIRED

    def test_deterministic(self) -> None:
        """Test the same text always yields the same result."""
        assert classify("sequence number too old") == classify("sequence number too old")


class TestFallback:
    """Test the unknown fallback."""

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_empty(self, raw) -> None:
        result = classify(raw)
        assert result.kind == ErrorKind.UNKNOWN
        assert result.message == "Unknown error occurred"

    def test_truncation(self) -> None:
        """Test unmatched text is truncated to 100 characters."""
        result = classify("x" * 150)

        assert result.kind == ErrorKind.UNKNOWN
        assert len(result.message) == 100
        assert result.message.endswith("...")

    def test_short_text_kept(self) -> None:
        assert truncate_message("odd failure") == "odd failure"


class TestTypedErrors:
    """Test already-typed errors pass through."""

    def test_validation_error(self) -> None:
        result = classify(InputValidationError("Amount must be a positive number greater than 0"))
        assert result.kind == ErrorKind.VALIDATION_ERROR

    def test_configuration_missing(self) -> None:
        result = classify(ConfigurationMissingError("Trading venue credential is not configured"))
        assert result.kind == ErrorKind.CONFIGURATION_MISSING

    def test_venue_errors(self) -> None:
        """Test venue errors map by retryability."""
        rejected = classify(VenueSubmissionError("Trading venue rejected the order", status_code=400))
        unavailable = classify(VenueSubmissionError("Trading venue unavailable", retryable=True))

        assert rejected.kind == ErrorKind.VENUE_REJECTED
        assert unavailable.kind == ErrorKind.NETWORK_FAULT

    def test_custom_tables(self) -> None:
        """Test classifier tables can be injected."""
        classifier = ErrorClassifier(error_codes={42: "Answer"}, substring_rules=())
        assert classifier.classify("code 42").message == "Answer"
        assert classifier.classify("insufficient").kind == ErrorKind.UNKNOWN
