"""
Vault App - Transaction Orchestration for the VaultFactory contract

Builds, validates and submits vault contract calls (create, join, leave,
deposit, withdraw, publish signal, execute trade, pause, resume, update
leader) through an injected wallet session, normalizing every failure into
a stable error taxonomy.
"""

__version__ = "0.1.0"
__author__ = "Vault App Team"
