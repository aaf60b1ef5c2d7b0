"""Subcommands of the topup CLI."""
