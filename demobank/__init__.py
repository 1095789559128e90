"""Demo Bank: session login, account listing and peer-to-peer transfers."""

__version__ = "0.1.0"
