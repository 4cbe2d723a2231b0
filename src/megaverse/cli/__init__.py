"""
megaverse.cli - Typer command-line interface.
"""
