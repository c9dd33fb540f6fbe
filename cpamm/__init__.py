"""Constant-product AMM state records, transfer-fee logic, price oracle and admin actions."""

__version__ = "0.1.0"