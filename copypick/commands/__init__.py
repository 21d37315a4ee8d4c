"""Typer command modules for the copypick CLI."""
