"""Textstore: derived-address text records over an account ledger."""

__version__ = "0.1.0"
