"""CLI entrypoint: Typer app definition and command registration"""

import typer

from mdenrich.cli.commands import enrich_cmd, repair_cmd, toc_cmd, validate_cmd


app = typer.Typer(name="mdenrich", no_args_is_help=True, help="Markdown metadata enrichment and validation")

app.command(name="enrich")(enrich_cmd)
app.command(name="validate")(validate_cmd)
app.command(name="repair")(repair_cmd)
app.command(name="toc")(toc_cmd)
