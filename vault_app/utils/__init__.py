"""
Utility functions module.

Address and amount primitives, wall-clock helpers and cooperative
cancellation shared across the orchestration layer.
"""
