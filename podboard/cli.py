#!/usr/bin/env python
"""
PodBoard command line.

Runs the processing pipeline locally or serves the HTTP API.
"""

import asyncio
import logging
from typing import Annotated, Optional

import typer
from dotenv import load_dotenv

from podboard.errors import PodBoardError
from podboard.run import build_pipeline, run_podboard
from podboard.timeline.formatting import format_duration, format_time

app = typer.Typer(
    help="PodBoard - Turn podcasts and videos into browsable timelines",
    no_args_is_help=True,
)


@app.command(name="process", help="Process a media URL and print the result")
def process_command(
    url: Annotated[str, typer.Argument(help="Media URL to process")],
    metadata_provider: Annotated[
        str, typer.Option(help="Metadata source: stub or oembed")
    ] = "stub",
    transcript_provider: Annotated[
        str, typer.Option(help="Transcript source: stub or youtube")
    ] = "stub",
    segmenter_provider: Annotated[
        str, typer.Option(help="Segmenter: stub or llm")
    ] = "stub",
    segmenter_model: Annotated[
        Optional[str], typer.Option(help="Model used by the llm segmenter")
    ] = None,
    stage_timeout: Annotated[
        float, typer.Option(help="Per-stage timeout in seconds")
    ] = 30.0,
    as_json: Annotated[
        bool, typer.Option("--json", help="Print the full result as JSON")
    ] = False,
):
    """
    Run every pipeline stage for URL and print metadata and segments.

    Examples:
        podboard process https://example.com/ep1

        podboard process "https://www.youtube.com/watch?v=iGkLcqLWxMA" \\
            --metadata-provider oembed --transcript-provider youtube \\
            --segmenter-provider llm
    """
    pipeline = build_pipeline(
        metadata_provider=metadata_provider,
        transcript_provider=transcript_provider,
        segmenter_provider=segmenter_provider,
        segmenter_model=segmenter_model,
        stage_timeout=stage_timeout,
    )

    def progress(step: str, message: str, percent: int, data: dict) -> None:
        typer.echo(f"[{percent:3d}%] {message}", err=True)

    try:
        result = asyncio.run(
            run_podboard(url, pipeline=pipeline, progress_callback=progress)
        )
    except PodBoardError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(result.model_dump_json(indent=2))
        return

    metadata = result.metadata
    if metadata is not None:
        typer.echo(f"{metadata.title} - {metadata.author}")
        typer.echo(f"Duration: {format_duration(metadata.duration)}")
    typer.echo(f"Segments: {len(result.segments)}")
    for segment in result.segments:
        typer.echo(
            f"  {format_time(segment.start_time)} - {format_time(segment.end_time)}"
            f"  {segment.title}"
        )


@app.command(name="serve", help="Serve the PodBoard HTTP API")
def serve_command(
    host: Annotated[str, typer.Option(help="Interface to bind")] = "0.0.0.0",
    port: Annotated[int, typer.Option(help="Port to listen on")] = 8000,
    reload: Annotated[bool, typer.Option(help="Reload on code changes")] = False,
):
    import uvicorn

    uvicorn.run("podboard_api.main:app", host=host, port=port, reload=reload)


@app.callback()
def main(
    log_level: Annotated[str, typer.Option(help="Logging level")] = "INFO",
):
    """
    PodBoard - Turn podcasts and videos into browsable timelines.

    Examples:
        # Process a URL with the demo collaborators
        podboard process https://example.com/ep1

        # Start the API
        podboard serve --port 8000
    """
    logging.basicConfig(level=log_level.upper(), format="%(message)s")
    load_dotenv()


if __name__ == "__main__":
    app()
