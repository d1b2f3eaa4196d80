"""CLI entrypoint for swara-grader command."""

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Annotated, Optional

import numpy as np
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from .audio import load_audio
from .config import load_settings
from .models import ChantScript
from .phonetics import similarity as phonetic_similarity
from .pitch import extract_pitch
from .scorer import ChantScorer
from .types import ChantScore, Transcription

app = typer.Typer(help="Grade Vedic chant pronunciation and swaras")
console = Console()


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Configure logging for every command."""
    settings = load_settings()
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def _load(path: Path, sr: int) -> np.ndarray:
    try:
        return load_audio(path, sr)
    except (OSError, ValueError) as e:
        console.print(f"[red]Could not load audio {path}: {e}[/red]")
        raise typer.Exit(1)


def _print_score(result: ChantScore) -> None:
    table = Table(title="Syllables")
    table.add_column("#", justify="right")
    table.add_column("Text")
    table.add_column("Expected")
    table.add_column("Detected")
    table.add_column("Conf", justify="right")
    table.add_column("Swara")
    table.add_column("Pron.", justify="right")

    pron = {s.index: s for s in result.pronunciation.syllables} if result.pronunciation else {}
    if result.analysis is not None:
        for s in result.analysis.syllables:
            c = s.classification
            if c is None:
                continue
            if not c.gradable:
                verdict = "[dim]ungradable[/dim]"
            elif c.acceptable:
                verdict = "[green]ok[/green]"
            else:
                verdict = "[red]wrong[/red]"
            p = pron.get(s.index)
            table.add_row(
                str(s.index),
                s.text,
                f"{s.canonical.symbol} {s.canonical.value}" if s.canonical else "-",
                f"{c.corrected.symbol} {c.corrected.value}",
                f"{c.confidence:.2f}",
                verdict,
                str(p.score) if p and p.reached else "-",
            )
        console.print(table)

    overall = "-" if result.overall is None else f"{result.overall} ({result.accuracy_label()})"
    console.print(f"[bold]Overall:[/bold] {overall}")
    console.print(f"Pronunciation: {result.pronunciation_accuracy if result.pronunciation_accuracy is not None else '-'}")
    accent = "-" if result.accent_accuracy is None else f"{result.accent_accuracy:.0f}"
    console.print(f"Swara: {accent}")
    for line in result.feedback:
        console.print(f"  • {line}")
    if result.missing:
        console.print(f"[yellow]Missing: {', '.join(result.missing)}[/yellow]")


@app.command()
def analyze(
    audio_file: Annotated[Path, typer.Argument(help="Recording to grade")],
    script_file: Annotated[Path, typer.Argument(help="Chant script JSON")],
    transcript: Annotated[Optional[str], typer.Option(help="Transcribed text of the recording")] = None,
    transcript_file: Annotated[Optional[Path], typer.Option(help="File holding the transcript")] = None,
    reference: Annotated[Optional[Path], typer.Option(help="Reference recording for DTW alignment")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print JSON instead of tables")] = False,
) -> None:
    """Grade a recording against a chant script."""
    settings = load_settings()
    try:
        script = ChantScript.from_json_file(script_file)
    except (OSError, ValidationError, json.JSONDecodeError) as e:
        console.print(f"[red]Invalid chant script: {e}[/red]")
        raise typer.Exit(1)

    audio = _load(audio_file, settings.sample_rate)
    reference_audio = _load(reference, settings.sample_rate) if reference else None

    transcription = None
    if transcript_file is not None:
        transcription = Transcription(text=transcript_file.read_text(encoding="utf-8"))
    elif transcript is not None:
        transcription = Transcription(text=transcript)

    scorer = ChantScorer(settings.to_scorer_config())
    result = scorer.score(
        script.to_canonical(),
        audio=audio,
        sr=settings.sample_rate,
        transcription=transcription,
        reference_audio=reference_audio,
    )

    if as_json:
        typer.echo(json.dumps(asdict(result), ensure_ascii=False, indent=2))
    else:
        _print_score(result)


@app.command()
def pitch(
    audio_file: Annotated[Path, typer.Argument(help="Recording to analyze")],
) -> None:
    """Summarize the pitch contour of a recording."""
    settings = load_settings()
    audio = _load(audio_file, settings.sample_rate)
    contour = extract_pitch(audio, settings.sample_rate, settings.to_scorer_config().pitch)

    f0 = contour.frequencies
    voiced = f0[f0 > 0]
    table = Table(title=str(audio_file))
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Duration (s)", f"{contour.duration:.2f}")
    table.add_row("Frames", str(len(contour)))
    table.add_row("Voiced frames", str(len(voiced)))
    if len(voiced):
        table.add_row("Median F0 (Hz)", f"{np.median(voiced):.1f}")
        table.add_row("Range (Hz)", f"{voiced.min():.1f} - {voiced.max():.1f}")
    console.print(table)


@app.command()
def compare(
    reference: Annotated[Path, typer.Argument(help="Reference recording")],
    user: Annotated[Path, typer.Argument(help="User recording")],
) -> None:
    """Compare the pitch contours of two performances."""
    settings = load_settings()
    scorer = ChantScorer(settings.to_scorer_config())
    result = scorer.compare(
        _load(reference, settings.sample_rate),
        _load(user, settings.sample_rate),
        settings.sample_rate,
    )
    if not result.path:
        console.print("[red]No voiced pitch to compare[/red]")
        raise typer.Exit(1)
    console.print(f"[bold]Contour similarity:[/bold] {result.similarity}")
    console.print(f"Mean deviation: {result.mean_cost:.2f} semitones over {len(result.path)} steps")


@app.command()
def similarity(
    observed: Annotated[str, typer.Argument(help="Transcribed text")],
    expected: Annotated[str, typer.Argument(help="Canonical text")],
) -> None:
    """Phonetic similarity of two texts."""
    console.print(f"{phonetic_similarity(observed, expected)}")


if __name__ == "__main__":
    app()
