"""Persona Briefing CLI: dev convenience tool for the local API."""

import base64
import json
import os
from pathlib import Path
from typing import Optional

import httpx
import typer
from rich.console import Console
from rich.json import JSON
from rich.panel import Panel
from rich.table import Table

from persona_briefing.ingestion.profile_parser import parse_profile

API_BASE = os.environ.get("PERSONA_API_URL", "http://localhost:8000/api")

app = typer.Typer(help="Persona Briefing CLI: generate design personas and audio briefings.")

console = Console()


def _decode_data_url(audio_url: str) -> bytes | None:
    """Return the bytes of a base64 data URL, or None for hosted URLs."""
    if not audio_url.startswith("data:"):
        return None
    _, _, encoded = audio_url.partition(",")
    return base64.b64decode(encoded)


@app.command("parse")
def parse_file(path: Path = typer.Argument(..., exists=True, readable=True, dir_okay=False)):
    """Parse a scraped Markdown file locally and print the profile as JSON."""
    profile = parse_profile(path.read_text(encoding="utf-8"))
    data = profile.model_dump(by_alias=True, exclude={"raw_markdown"})
    console.print(JSON(json.dumps(data, indent=2)))


@app.command("health")
def health():
    """Check that the API is up."""
    try:
        resp = httpx.get(f"{API_BASE}/health", timeout=10)
        resp.raise_for_status()
    except httpx.ConnectError:
        console.print("[red]Cannot connect to API. Is the backend running?[/red]")
        raise typer.Exit(1)
    except httpx.HTTPStatusError as e:
        console.print(f"[red]API error: {e.response.status_code}[/red]")
        raise typer.Exit(1)
    console.print("[green]API is healthy.[/green]")


@app.command("generate")
def generate(
    brief: str = typer.Option(..., "--brief", "-b", help="Design brief (at least 10 characters)"),
    linkedin_url: Optional[str] = typer.Option(None, "--linkedin-url", "-l", help="LinkedIn profile URL"),
    article_file: Optional[Path] = typer.Option(None, "--article-file", "-f", help="File with article text"),
    article_url: Optional[str] = typer.Option(None, "--article-url", "-u", help="Article URL to fetch"),
    audio_out: Optional[Path] = typer.Option(None, "--audio-out", "-o", help="Write the MP3 briefing here"),
):
    """Generate a persona and audio briefing via the API."""
    payload: dict[str, str] = {"designBrief": brief}
    if linkedin_url:
        payload["linkedinUrl"] = linkedin_url
    if article_file:
        payload["articleText"] = article_file.read_text(encoding="utf-8")
    if article_url:
        payload["articleUrl"] = article_url

    console.print("[yellow]Generating persona... this calls three external services.[/yellow]")
    try:
        resp = httpx.post(
            f"{API_BASE}/persona/generate",
            json=payload,
            timeout=httpx.Timeout(connect=10, read=180, write=10, pool=10),
        )
    except httpx.ConnectError:
        console.print("[red]Cannot connect to API. Is the backend running?[/red]")
        raise typer.Exit(1)
    except httpx.ReadTimeout:
        console.print("[red]Request timed out.[/red]")
        raise typer.Exit(1)

    if resp.status_code >= 400:
        try:
            error = resp.json()
        except ValueError:
            console.print(f"[red]API error: {resp.status_code}: {resp.text}[/red]")
            raise typer.Exit(1)
        console.print(f"[red]{error.get('error')} ({error.get('code')})[/red]")
        if error.get("details"):
            console.print(f"  {error['details']}")
        console.print(f"[dim]Request ID: {error.get('requestId')}[/dim]")
        raise typer.Exit(1)

    data = resp.json()
    persona = data["persona"]

    table = Table(title=persona["personaName"], show_header=False)
    table.add_column("Field", style="cyan bold")
    table.add_column("Value")
    context = persona["professionalContext"]
    table.add_row("Role", f"{context['role']} ({context['seniority']}, {context['industry']})")
    table.add_row("Tone", f"{persona['communicationStyle']['tone']} / verbosity {persona['communicationStyle']['verbosity']}")
    table.add_row("Visual style", persona["designBiases"]["visualStyle"])
    table.add_row("UX priority", persona["designBiases"]["uxPriority"])
    table.add_row("Do", "\n".join(persona["designGuidance"]["do"]))
    table.add_row("Avoid", "\n".join(persona["designGuidance"]["avoid"]))
    if persona.get("briefConflicts"):
        table.add_row("Brief conflicts", "[yellow]" + "\n".join(persona["briefConflicts"]) + "[/yellow]")
    console.print(table)

    console.print(Panel(data["audioScript"], title="Audio briefing"))
    console.print(f"[dim]Processed in {data['processingTime']}ms[/dim]")

    if audio_out:
        audio = _decode_data_url(data["audioUrl"])
        if audio is None:
            console.print(f"[yellow]Audio is hosted at {data['audioUrl']}; nothing written.[/yellow]")
        else:
            audio_out.write_bytes(audio)
            console.print(f"[green]Wrote {len(audio)} bytes to {audio_out}[/green]")


@app.command("serve")
def serve(reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes")):
    """Run the API server with uvicorn."""
    import uvicorn

    from persona_briefing.core.config import settings

    uvicorn.run(
        "persona_briefing.main:app",
        host=settings.host,
        port=settings.port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    app()
