"""Outbound / store gateways used by the analytics services."""
