"""Entitlement and interaction ledger for a two-party matching service."""

__version__ = "0.1.0"
