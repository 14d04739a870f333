"""Staged-rollout publishing for application builds."""

__version__ = "0.3.0"
