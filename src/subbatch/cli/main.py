"""Command line front end for the batch subtitle translator."""

import asyncio
from pathlib import Path
from typing import NoReturn, Optional

import typer

from subbatch.common.config import settings
from subbatch.common.event_publisher import EventPublisher
from subbatch.common.exceptions import SubtitleParseError
from subbatch.common.logging_config import setup_service_logging
from subbatch.common.schemas import (
    BackendConfig,
    ConnectionResult,
    EventType,
    ProgressEvent,
)
from subbatch.common.subtitle_parser import SubtitleDocument
from subbatch.common.utils import DateTimeUtils
from subbatch.translator.file_operations import (
    read_and_parse_subtitle_file,
    save_translated_file,
)
from subbatch.translator.ollama_client import OllamaClient, normalize_host
from subbatch.translator.translation_orchestrator import BatchOrchestrator
from subbatch.translator.translation_service import SubtitleTranslator

app = typer.Typer(add_completion=False, help="Translate SRT subtitles through a local Ollama backend.")

EXIT_RUNTIME = 1
EXIT_CONFIG = 2
EXIT_PARSE = 3


def _create_client() -> OllamaClient:
    return OllamaClient()


def _fail(label: str, message: str, code: int) -> NoReturn:
    typer.echo(f"{label}: {message}", err=True)
    raise typer.Exit(code=code)


def _report_connection(host: str, result: ConnectionResult) -> None:
    if result.ok:
        typer.echo(f"✅ Connected to {normalize_host(host)}")
        return
    detail = f" ({result.detail})" if result.detail else ""
    typer.echo(
        f"❌ {normalize_host(host)}: {result.status.value}{detail}", err=True
    )
    if result.remediation:
        typer.echo(result.remediation, err=True)


def _print_progress(event: ProgressEvent) -> None:
    stats = event.stats
    if event.event_type == EventType.BATCH_COMPLETED:
        note = f" [kept original: {event.fallback.value}]" if event.fallback else ""
        typer.echo(
            f"[{event.batch_index + 1}/{event.total_batches}] "
            f"{stats.processed}/{stats.total} lines ({stats.progress_percent:.0f}%) "
            f"{stats.elapsed_seconds:.1f}s, {stats.throughput:.1f} lines/s{note}"
        )
    elif event.event_type == EventType.TRANSLATION_COMPLETED:
        typer.echo(
            f"✅ Translated {stats.processed} lines in "
            f"{DateTimeUtils.format_duration(stats.elapsed_seconds)} "
            f"({stats.throughput:.1f} lines/s)"
        )


def _print_preview(document: SubtitleDocument, event: ProgressEvent) -> None:
    """Show the newest translated lines after each batch."""
    if event.event_type != EventType.BATCH_COMPLETED:
        return
    for entry in document.preview(limit=settings.preview_limit):
        text = entry.translated_text.replace("\n", " / ")
        typer.echo(f"  #{entry.id} {text}")


@app.callback()
def main(
    log_level: str = typer.Option(None, help="Log level (overrides config)."),
) -> None:
    """Configure logging before running a command."""
    setup_service_logging(log_level=log_level)


@app.command()
def check(
    host: str = typer.Option(None, help="Ollama address (overrides config)."),
) -> None:
    """Probe the backend and list its models."""
    host = host or settings.ollama_host

    async def _check() -> ConnectionResult:
        async with _create_client() as client:
            result = await client.probe(host)
            _report_connection(host, result)
            if result.ok:
                available = await client.list_models(host)
                typer.echo(f"{len(available)} model(s) available")
            return result

    result = asyncio.run(_check())
    if not result.ok:
        raise typer.Exit(code=EXIT_CONFIG)


@app.command()
def models(
    host: str = typer.Option(None, help="Ollama address (overrides config)."),
) -> None:
    """List models available on the backend."""
    host = host or settings.ollama_host

    async def _list():
        async with _create_client() as client:
            return await client.list_models(host)

    available = asyncio.run(_list())
    if not available:
        _fail("Connection error", f"no models reported by {normalize_host(host)}", EXIT_CONFIG)

    typer.echo("name\tsize\tmodified_at")
    for model in available:
        typer.echo(f"{model.name}\t{model.size or ''}\t{model.modified_at or ''}")


async def _translate_document(
    document: SubtitleDocument,
    config: BackendConfig,
    batch_size: int,
    source_language: Optional[str],
    target_language: Optional[str],
) -> BatchOrchestrator:
    async with _create_client() as client:
        result = await client.probe(config.host)
        _report_connection(config.host, result)
        if not result.ok:
            _fail("Connection error", f"backend not usable ({result.status.value})", EXIT_CONFIG)

        if not config.model:
            available = await client.list_models(config.host)
            if not available:
                _fail("Configuration error", "no model configured and none available", EXIT_CONFIG)
            config.model = available[0].name
            typer.echo(f"Using model {config.model}")

        translator = SubtitleTranslator(
            client,
            config,
            source_language=source_language,
            target_language=target_language,
        )
        publisher = EventPublisher()
        publisher.subscribe(_print_progress)
        publisher.subscribe(lambda event: _print_preview(document, event))
        orchestrator = BatchOrchestrator(
            document, translator, batch_size=batch_size, publisher=publisher
        )
        await orchestrator.run()
        return orchestrator


@app.command()
def translate(
    subtitle_file: Path = typer.Argument(..., help="SRT file to translate."),
    host: str = typer.Option(None, help="Ollama address (overrides config)."),
    model: str = typer.Option(None, help="Model name (defaults to the first available)."),
    batch_size: int = typer.Option(None, help="Lines per backend call (overrides config)."),
    output: Path = typer.Option(None, help="Output path (defaults to <name>.cn.srt)."),
    source_language: str = typer.Option(None, help="Source language (overrides config)."),
    target_language: str = typer.Option(None, help="Target language (overrides config)."),
) -> None:
    """Translate an SRT file batch by batch."""
    config = BackendConfig(
        host=host or settings.ollama_host,
        model=model if model is not None else settings.ollama_model,
    )
    batch_size = batch_size if batch_size is not None else settings.translation_batch_size
    if batch_size < 1:
        raise typer.BadParameter("--batch-size must be at least 1.")

    try:
        document = read_and_parse_subtitle_file(subtitle_file)
    except FileNotFoundError as e:
        _fail("Configuration error", str(e), EXIT_CONFIG)
    except SubtitleParseError as e:
        _fail("Parse error", str(e), EXIT_PARSE)

    typer.echo(f"Loaded {len(document)} subtitle lines from {subtitle_file}")

    asyncio.run(
        _translate_document(
            document, config, batch_size, source_language, target_language
        )
    )

    try:
        out_path = save_translated_file(document, subtitle_file, output_path=output)
    except OSError as e:
        _fail("Runtime error", f"could not write output: {e}", EXIT_RUNTIME)
    typer.echo(f"📦 Output: {out_path}")


def _main() -> None:
    app()


if __name__ == "__main__":
    _main()
