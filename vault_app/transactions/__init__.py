"""
Contract call construction for VaultFactory entry functions.
"""
from .builder import FUNCTION_NAMES, FunctionRegistry, TransactionBuilder

__all__ = ["FUNCTION_NAMES", "FunctionRegistry", "TransactionBuilder"]
