"""
Gas policy resolution for vault contract calls.
"""
from .policy import GasPolicyResolver, resolve_gas_profile

__all__ = ["GasPolicyResolver", "resolve_gas_profile"]
