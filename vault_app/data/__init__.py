"""
Caller input validation and normalization.
"""
