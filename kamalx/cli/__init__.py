"""kamalx CLI — Typer-based command-line interface.

Provides the ``kamalx`` command, which runs kamal under the dashboard.
Output outside the dashboard uses Rich for formatted terminal display.
"""
