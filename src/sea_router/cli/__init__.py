"""Typer CLI for routing and grid preprocessing."""
