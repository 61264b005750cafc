"""
Command-line interface: Typer application, Rich formatters and progress display.
"""
