"""CLI command implementations"""

from pathlib import Path
from typing import Annotated, Optional

import typer
from loguru import logger

from mdenrich.config import Settings, load_config
from mdenrich.core.export import write_document
from mdenrich.core.frontmatter import FrontmatterRepair
from mdenrich.core.models import ProcessingContext
from mdenrich.core.parse import discover_files
from mdenrich.core.pipeline import Pipeline
from mdenrich.core.toc import TocBuilder


_log_handler: Optional[int] = None


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _configure_logging(level: str) -> None:
    """Route loguru output to stderr at the configured level, replacing any earlier CLI sink."""
    global _log_handler
    if _log_handler is None:
        logger.remove()
    else:
        logger.remove(_log_handler)
    _log_handler = logger.add(lambda msg: typer.echo(msg, err=True, nl=False), level=level, format="{level}: {message}")


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    _configure_logging(settings.log_level)
    return settings


def _files(path: str) -> tuple[Path, list[Path]]:
    """Resolve PATH to (root, supported files); root anchors output paths."""
    source = Path(path)
    if not source.exists():
        _fail(f"Path not found: {path}")
    files = discover_files(source)
    if not files:
        _fail(f"No supported documents found under {path}")
    return (source if source.is_dir() else source.parent), files


def _read(p: Path) -> str:
    try:
        return p.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        _fail(f"Cannot read {p}", e)


def enrich_cmd(
    path: Annotated[str, typer.Argument(help="File or directory to enrich")],
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    toc: Annotated[Optional[bool], typer.Option("--toc/--no-toc", help="Insert a table of contents")] = None,
    repair: Annotated[Optional[bool], typer.Option("--repair/--no-repair", help="Repair frontmatter blocks")] = None,
    workers: Annotated[Optional[int], typer.Option("--max-workers", help="Worker threads for the batch")] = None,
    parser: Annotated[Optional[str], typer.Option("--parser-config", help="MarkdownIt preset name")] = None,
    ):
    """Run the plugin pipeline and write enriched documents plus sidecar JSON."""
    settings = _settings(overrides={
        "output_dir": out, "generate_toc": toc, "repair_frontmatter": repair,
        "max_workers": workers, "parser_config": parser,
    })
    root, files = _files(path)
    output_dir = Path(settings.output_dir)

    contexts = [
        ProcessingContext.for_path(p, output_dir / p.relative_to(root), options=settings)
        for p in files
    ]
    items = Pipeline(settings=settings).run_batch(contexts)

    written = failed = 0
    for item in items:
        if item.error:
            typer.echo(f"  failed: {item.context.input_path}: {item.error}")
            failed += 1
            continue
        rel = Path(item.context.input_path).relative_to(root)
        doc_path, _ = write_document(item.result, rel, output_dir)
        typer.echo(f"  {item.context.input_path} -> {doc_path}")
        written += 1

    typer.echo(f"Enriched {written} document(s) to {output_dir}/")
    if failed:
        typer.echo(f"{failed} document(s) failed", err=True)
        raise typer.Exit(1)


def validate_cmd(
    path: Annotated[str, typer.Argument(help="File or directory to validate")],
    ):
    """Report frontmatter issues and an overall score per document."""
    settings = _settings()
    _, files = _files(path)
    engine = FrontmatterRepair.from_settings(settings)

    invalid = 0
    for p in files:
        result = engine.validate_content(_read(p), str(p))
        typer.echo(f"{p}: {result.score.overall} ({result.score.points}/100)")
        for issue in result.issues:
            typer.echo(f"  [{issue.bucket}] {issue.message}")
        invalid += not result.valid

    typer.echo(f"Validated {len(files)} document(s), {invalid} invalid")
    if invalid:
        raise typer.Exit(1)


def repair_cmd(
    path: Annotated[str, typer.Argument(help="File or directory to repair")],
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Report repairs without writing files")] = False,
    ):
    """Repair frontmatter blocks in place."""
    settings = _settings()
    _, files = _files(path)
    engine = FrontmatterRepair.from_settings(settings)

    counts = {"repaired": 0, "unchanged": 0, "failed": 0}
    for p in files:
        result = engine.repair_frontmatter(_read(p), str(p))
        if not result.success:
            status = "failed"
        elif result.fixed:
            status = "repaired"
            if not dry_run:
                p.write_text(result.repaired_content, encoding='utf-8')
        else:
            status = "unchanged"
        counts[status] += 1
        if status != "unchanged":
            typer.echo(f"  {status}: {p} ({'; '.join(result.issues)})")

    prefix = "Dry run - " if dry_run else ""
    typer.echo(
        f"{prefix}Repair complete - "
        f"{counts['repaired']} repaired, "
        f"{counts['unchanged']} unchanged, "
        f"{counts['failed']} failed"
    )
    if counts["failed"]:
        raise typer.Exit(1)


def toc_cmd(
    path: Annotated[str, typer.Argument(help="Markdown file")],
    as_html: Annotated[bool, typer.Option("--html", help="Render as an HTML <nav> block")] = False,
    depth: Annotated[Optional[int], typer.Option("--max-depth", help="Deepest heading level listed")] = None,
    ):
    """Print the table of contents for a document."""
    settings = _settings(overrides={"toc_max_depth": depth})
    source = Path(path)
    if not source.is_file():
        _fail(f"Not a file: {path}")

    builder = TocBuilder.from_settings(settings)
    entries = builder.section_entries(builder.generate_toc(_read(source)))
    if not entries:
        typer.echo("No table of contents (too few headings).")
        return
    typer.echo(builder.render_toc_as_html(entries) if as_html else builder.render_toc_as_markdown(entries))
