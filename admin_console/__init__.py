"""Marketplace admin console: transaction bulk import, session gate and admin API client."""

__version__ = "0.1.0"
