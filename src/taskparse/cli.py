"""Command-line interface for taskparse."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import click
from fuzzywuzzy import fuzz, process
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .config import ParserSettings, load_config
from .language import LanguageConfig, UnknownLanguageError, get_language, language_names
from .models import AnnotationType, ParsedTask
from .parser import TaskParser

logger = logging.getLogger(__name__)

ANNOTATION_STYLES = {
    AnnotationType.SCHEDULED_DATE: "blue",
    AnnotationType.DEADLINE: "red",
    AnnotationType.TIME: "cyan",
    AnnotationType.PRIORITY: "bold yellow",
    AnnotationType.PROJECT: "magenta",
    AnnotationType.LABEL: "green",
    AnnotationType.RECURRING: "bright_blue",
}


def get_console(stderr: bool = False) -> Console:
    return Console(stderr=stderr)


def suggest_languages(name: str, limit: int = 3) -> List[str]:
    """Registered language names that look like ``name``."""
    matches = process.extractBests(name.lower(), language_names(), scorer=fuzz.ratio,
                                   score_cutoff=60, limit=limit)
    return [match[0] for match in matches]


def resolve_language(name: Optional[str], settings: ParserSettings, console: Console) -> LanguageConfig:
    """Language for ``name``; unknown names fall back to the configured default."""
    if not name:
        return settings.language()
    try:
        return get_language(name)
    except UnknownLanguageError:
        fallback = settings.language()
        console.print(f"[yellow]Warning:[/yellow] unknown language '{escape(name)}', using {fallback.name}.")
        suggestions = suggest_languages(name)
        if suggestions:
            console.print(f"[dim]Did you mean: {', '.join(suggestions)}?[/dim]")
        return fallback


def _format_datetime(value: datetime, settings: ParserSettings) -> str:
    if value.hour or value.minute:
        return value.strftime(f"{settings.date_format} {settings.time_format}")
    return value.strftime(settings.date_format)


def render_task(task: ParsedTask, language: LanguageConfig, settings: ParserSettings, console: Console) -> None:
    """Print the extracted fields and the annotation table."""
    rows = [("Title", escape(task.title) if task.title else "[dim](empty)[/dim]")]
    if task.scheduled_date:
        rows.append(("Scheduled", _format_datetime(task.scheduled_date, settings)))
    if task.deadline:
        rows.append(("Deadline", _format_datetime(task.deadline, settings)))
    if task.time:
        rows.append(("Time", str(task.time)))
    if task.priority:
        rows.append(("Priority", f"p{task.priority}"))
    if task.project:
        rows.append(("Project", escape(f"@{task.project}")))
    if task.labels:
        rows.append(("Labels", escape(" ".join(f"#{label}" for label in task.labels))))
    if task.recurring:
        rows.append(("Recurring", task.recurring.describe()))

    body = "\n".join(f"[bold]{label}:[/bold] {value}" for label, value in rows)
    console.print(Panel(body, title=f"Parsed task ({language.code})", border_style="blue"))

    if not task.annotations:
        console.print("[dim]No annotations.[/dim]")
        return

    table = Table(title="Annotations")
    table.add_column("Type", style="bold")
    table.add_column("Range", justify="right")
    table.add_column("Text")
    for annotation in task.annotations:
        style = ANNOTATION_STYLES.get(annotation.type, "white")
        table.add_row(
            f"[{style}]{annotation.type.value}[/{style}]",
            f"{annotation.start}-{annotation.end}",
            escape(annotation.text),
        )
    console.print(table)


def _parse_reference(ctx, param, value):
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"'{value}' is not an ISO date or datetime")


@click.command()
@click.argument("text", nargs=-1)
@click.option("--lang", "-l", help="Language code or name (de, en, fr, es, ...)")
@click.option("--reference", callback=_parse_reference, help="Reference time in ISO format")
@click.option("--config", type=click.Path(dir_okay=False), help="Path to config file")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.pass_context
def main(ctx, text, lang, reference, config, as_json, verbose):
    """Parse a natural language task description.

    \b
    Examples:
      parse-task --lang en "Meeting tomorrow 14:00 p1 @Work #important"
      parse-task "Bericht abgeben bis Freitag"
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    input_text = " ".join(text).strip()
    err_console = get_console(stderr=True)
    if not input_text:
        err_console.print("[red]Error:[/red] no task text given.")
        ctx.exit(1)

    settings = load_config(Path(config) if config else None)
    language = resolve_language(lang, settings, err_console)
    logger.debug(f"Parsing with language {language.code}, reference {reference or 'now'}")

    parser = TaskParser(language, calendar=settings.make_calendar(), reference=reference)
    task = parser.parse(input_text)

    if as_json:
        click.echo(json.dumps({"language": language.code, **task.to_dict()}, ensure_ascii=False, indent=2))
    else:
        render_task(task, language, settings, get_console())


if __name__ == "__main__":
    main()
