"""CLI entrypoint: Typer app definition and command registration"""

import typer

from mdcite.cli.commands import extract_cmd, validate_cmd


app = typer.Typer(name="mdcite", no_args_is_help=True, help="Markdown citation validation and content extraction")

app.command(name="validate")(validate_cmd)
app.command(name="extract")(extract_cmd)
