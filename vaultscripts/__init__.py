"""vaultscripts - entry tooling for a markdown knowledge vault."""

__version__ = "0.1.0"
