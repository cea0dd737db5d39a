"""Evently: backend billetterie (checkout Stripe, webhook de commandes, reporting)."""

__version__ = "0.1.0"
