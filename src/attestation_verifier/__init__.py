"""Attestation verification endpoint."""

__version__ = "1.0.0"
