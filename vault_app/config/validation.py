"""Configuration validation utilities."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse


@dataclass(frozen=True)
class ConfigFieldError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_gas_profile(
        params: Mapping[str, Any],
        min_execution_units: int = 1000,
        min_unit_price: int = 1,
    ) -> list[ConfigFieldError]:
        """Validate one gas profile against the chain's hard minimums."""
        errors = []

        value = params.get("max_execution_units")
        if not _is_int(value) or value < min_execution_units:
            errors.append(ConfigFieldError(
                field="max_execution_units",
                message=f"Must be an integer >= {min_execution_units}",
                value=value
            ))

        value = params.get("unit_price")
        if not _is_int(value) or value < min_unit_price:
            errors.append(ConfigFieldError(
                field="unit_price",
                message=f"Must be an integer >= {min_unit_price}",
                value=value
            ))

        if "expiration_offset_seconds" in params:
            value = params["expiration_offset_seconds"]
            if not _is_int(value) or value <= 0:
                errors.append(ConfigFieldError(
                    field="expiration_offset_seconds",
                    message="Must be a positive integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_gas_params(params: Mapping[str, Any]) -> list[ConfigFieldError]:
        """Validate the gas table and its floors."""
        errors = []
        min_units = params.get("min_execution_units", 1000)
        min_price = params.get("min_unit_price", 1)

        for name, profile in params.get("profiles", {}).items():
            for error in ConfigValidator.validate_gas_profile(profile, min_units, min_price):
                errors.append(ConfigFieldError(
                    field=f"profiles.{name}.{error.field}",
                    message=error.message,
                    value=error.value
                ))

        profiles = params.get("profiles", {})
        for operation, profile_name in params.get("operation_profiles", {}).items():
            if profile_name not in profiles:
                errors.append(ConfigFieldError(
                    field=f"operation_profiles.{operation}",
                    message="Must name a defined gas profile",
                    value=profile_name
                ))

        return errors

    @staticmethod
    def validate_network_params(params: Mapping[str, Any]) -> list[ConfigFieldError]:
        """Validate network expiration windows."""
        errors = []
        offsets = params.get("expiration_offsets", {})

        for name, value in offsets.items():
            if not _is_int(value) or value <= 0:
                errors.append(ConfigFieldError(
                    field=f"expiration_offsets.{name}",
                    message="Must be a positive integer",
                    value=value
                ))

        default_network = params.get("default_network")
        if default_network is not None and default_network not in offsets:
            errors.append(ConfigFieldError(
                field="default_network",
                message="Must have an expiration offset",
                value=default_network
            ))

        return errors

    @staticmethod
    def validate_orchestrator_params(params: Mapping[str, Any]) -> list[ConfigFieldError]:
        """Validate orchestrator parameters."""
        errors = []

        if "confirmation_poll_interval_seconds" in params:
            value = params["confirmation_poll_interval_seconds"]
            if not _is_number(value) or value <= 0:
                errors.append(ConfigFieldError(
                    field="confirmation_poll_interval_seconds",
                    message="Must be a positive number",
                    value=value
                ))

        for name in ("trade_signal_scale", "retry_max_attempts"):
            if name in params:
                value = params[name]
                if not _is_int(value) or value < 1:
                    errors.append(ConfigFieldError(
                        field=name,
                        message="Must be a positive integer",
                        value=value
                    ))

        if "amount_decimals" in params:
            value = params["amount_decimals"]
            if not _is_int(value) or value < 0:
                errors.append(ConfigFieldError(
                    field="amount_decimals",
                    message="Must be a non-negative integer",
                    value=value
                ))

        if "retry_delay_seconds" in params:
            value = params["retry_delay_seconds"]
            if not _is_number(value) or value < 0:
                errors.append(ConfigFieldError(
                    field="retry_delay_seconds",
                    message="Must be a non-negative number",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_venue_params(params: Mapping[str, Any]) -> list[ConfigFieldError]:
        """Validate venue parameters."""
        errors = []

        if "base_url" in params:
            parsed = urlparse(str(params["base_url"]))
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                errors.append(ConfigFieldError(
                    field="base_url",
                    message="Must be an http(s) URL",
                    value=params["base_url"]
                ))

        if "timeout_seconds" in params:
            value = params["timeout_seconds"]
            if not _is_number(value) or value <= 0:
                errors.append(ConfigFieldError(
                    field="timeout_seconds",
                    message="Must be a positive number",
                    value=value
                ))

        if "collateral" in params:
            value = params["collateral"]
            if not _is_number(value) or value <= 0:
                errors.append(ConfigFieldError(
                    field="collateral",
                    message="Must be a positive number",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_config(config: Mapping[str, Any]) -> list[ConfigFieldError]:
        """Validate complete configuration."""
        errors = []

        if "gas" in config:
            errors.extend(ConfigValidator.validate_gas_params(config["gas"]))

        if "network" in config:
            errors.extend(ConfigValidator.validate_network_params(config["network"]))

        if "orchestrator" in config:
            errors.extend(ConfigValidator.validate_orchestrator_params(config["orchestrator"]))

        if "venue" in config:
            errors.extend(ConfigValidator.validate_venue_params(config["venue"]))

        return errors
