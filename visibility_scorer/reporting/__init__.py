"""
visibility_scorer.reporting: Terminal formatting and file export for CLI commands.

Modules:
  formatters: ASCII report, history and weight-table formatters for
               Typer CLI commands.
  export:     JSON and CSV writers for score history.
"""
