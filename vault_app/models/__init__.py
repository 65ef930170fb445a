"""
Value objects shared across the orchestration pipeline.
"""
