from __future__ import annotations

"""Command line for scanning saved pages and checking identifiers."""

import json
import logging
from pathlib import Path
from typing import Any, Mapping

import click
from tabulate import tabulate

from scpDetector import __version__
from scpDetector.config import load_detector_config
from scpDetector.core.detector import create_detector
from scpDetector.core.page_classifier import classify_page
from scpDetector.core.page_info import describe_current_page, extract_tags
from scpDetector.document.html import HtmlDocument
from scpDetector.errors import LoggingErrorHandler
from scpDetector.transforms.canonical import normalize_identifier
from scpDetector.utils.log_json import JsonLogger, NullLogger


class _RecordingErrorHandler(LoggingErrorHandler):
    """Log like the default handler and keep the errors for the exit status."""

    def __init__(self, logger: Any) -> None:
        super().__init__(logger)
        self.errors: list[tuple[BaseException, dict]] = []

    def handle_error(self, error: BaseException, context: Mapping[str, Any]) -> None:
        self.errors.append((error, dict(context or {})))
        super().handle_error(error, context)


def _load_document(html_file: Path, url: str | None) -> HtmlDocument:
    try:
        return HtmlDocument.from_path(html_file, url or "", observable=False)
    except (OSError, UnicodeDecodeError) as exc:
        raise click.ClickException(f"Cannot read {html_file}: {exc}")


@click.group()
@click.version_option(__version__)
def cli() -> None:  # pragma: no cover - simple wrapper
    """scpDetector command line."""


@cli.command()
@click.argument("html_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--url", default=None, help="URL the page was saved from (base for relative links).")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML detector configuration.",
)
@click.option(
    "--allowed-domain",
    "allowed_domains",
    multiple=True,
    help="Only report entities for these hostnames (repeatable).",
)
@click.option("--max-nodes", type=int, default=None, help="Cap on text elements scanned.")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["json", "table"]),
    default="json",
    show_default=True,
)
@click.option("--verbose", is_flag=True, help="Log detector events to stderr.")
def scan(
    html_file: Path,
    url: str | None,
    config_path: Path | None,
    allowed_domains: tuple[str, ...],
    max_nodes: int | None,
    fmt: str,
    verbose: bool,
) -> None:
    """Detect SCP mentions in a saved HTML page."""
    try:
        config = load_detector_config(config_path)
    except (OSError, ValueError) as exc:
        raise click.ClickException(str(exc))
    logger = JsonLogger("cli", level=logging.DEBUG) if verbose else NullLogger()
    errors = _RecordingErrorHandler(logger)
    options: dict[str, Any] = {"observe": False, "autostart": False}
    if allowed_domains:
        options["allowed_domains"] = allowed_domains
    if max_nodes is not None:
        options["max_nodes"] = max_nodes

    document = _load_document(html_file, url)
    detector = create_detector(document, config, logger=logger, error_handler=errors, **options)
    try:
        detector.refresh()
    finally:
        detector.dispose()
    if errors.errors:
        error, context = errors.errors[0]
        raise click.ClickException(f"{context.get('action', 'scan')} failed: {error}")

    results = detector.get_results()
    if fmt == "table":
        page = results.page
        click.echo(f"page: {page.type.value} ({page.confidence}) site={page.site} locale={page.locale}")
        rows = [
            [e.id, e.kind.value, e.context.value, e.confidence.value, e.url or ""]
            for e in results.entities
        ]
        click.echo(tabulate(rows, headers=["Id", "Kind", "Context", "Confidence", "Url"]))
    else:
        click.echo(json.dumps(results.to_dict(), ensure_ascii=False, indent=2))


@cli.command()
@click.argument("raw", nargs=-1, required=True)
def normalize(raw: tuple[str, ...]) -> None:
    """Print the canonical id and kind of each RAW identifier."""
    rows = []
    for value in raw:
        norm = normalize_identifier(value)
        rows.append([value, norm.id if norm else "-", norm.kind.value if norm else "-"])
    click.echo(tabulate(rows, headers=["Input", "Id", "Kind"]))


@cli.command()
@click.argument("url")
@click.option("--title", default="", help="Document title.")
def classify(url: str, title: str) -> None:
    """Classify the page at URL."""
    result = classify_page(url, title, load_detector_config().domain_map)
    click.echo(json.dumps(result.to_dict(), sort_keys=True, indent=2))


@cli.command(name="page-info")
@click.argument("html_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--url", required=True, help="URL the page was saved from.")
def page_info(html_file: Path, url: str) -> None:
    """Describe the article, series or tale shown by a saved page."""
    document = _load_document(html_file, url)
    info = describe_current_page(document, load_detector_config().domain_map)
    payload = {
        "page": info.to_dict() if info else None,
        "tags": extract_tags(document),
    }
    click.echo(json.dumps(payload, ensure_ascii=False, sort_keys=True, indent=2))


def main() -> None:  # pragma: no cover - CLI entrypoint
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
