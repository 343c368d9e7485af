"""Endpoint modules for the Critical Maps and criticalmass.in APIs."""
