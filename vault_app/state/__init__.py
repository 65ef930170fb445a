"""
Orchestrator invocation phases and phase machine.
"""
