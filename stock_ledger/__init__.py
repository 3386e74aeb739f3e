"""Store stock ledger for construction-site material procurement."""

__version__ = "0.1.0"
