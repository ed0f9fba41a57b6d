"""Typer command-line interface for the watchability pipeline."""
