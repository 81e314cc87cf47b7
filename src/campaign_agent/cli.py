"""Typer CLI for campaign-agent."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
import yaml
from pydantic import ValidationError
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from campaign_agent.config import get_settings
from campaign_agent.errors import ConfigurationError, PersistenceError, RequestValidationError
from campaign_agent.models import AgentRequest, IdeaListItem, SessionContext, StoredMessage
from campaign_agent.service import handle_turn, start_session
from campaign_agent.storage import (
    LocalMessageStore,
    MessageStore,
    SupabaseMessageStore,
    summarize_session,
)

app = typer.Typer(
    name="campaign",
    help="campaign-agent: marketing ideas and concepts from a business context.",
    add_completion=False,
)
console = Console()


def _make_store(output: Optional[str]) -> MessageStore:
    """Local store unless STORE_BACKEND=supabase and no --output was given."""
    settings = get_settings()
    if output is None and settings.STORE_BACKEND == "supabase":
        try:
            return SupabaseMessageStore()
        except ConfigurationError as exc:
            rprint(f"[red]Error:[/red] {exc}")
            raise typer.Exit(1)
    return LocalMessageStore(output or settings.LOCAL_STORE_DIR)


def _make_provider():
    """Instantiate the OpenAI provider, exiting gracefully if key is missing."""
    try:
        from campaign_agent.llm.openai_provider import OpenAIProvider
        return OpenAIProvider()
    except ConfigurationError as exc:
        rprint(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)


def _load_session(store: MessageStore, session_id: str):
    try:
        session = store.get_session(session_id)
    except PersistenceError as exc:
        rprint(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)
    if session is None:
        rprint(f"[red]Error:[/red] Session not found: {session_id}")
        raise typer.Exit(1)
    return session


def _find_idea(messages: List[StoredMessage], idea_id: str) -> Optional[IdeaListItem]:
    """Find *idea_id* in the newest idea_list that contains it."""
    for message in reversed(messages):
        if message.type != "idea_list":
            continue
        for item in message.content.get("items", []):
            if isinstance(item, dict) and str(item.get("id")) == idea_id:
                try:
                    return IdeaListItem.model_validate(item)
                except ValidationError as exc:
                    rprint(f"[red]Error:[/red] Unusable idea {idea_id}: {exc.error_count()} error(s)")
                    raise typer.Exit(1)
    return None


# ── Rendering ────────────────────────────────────────────────────────────────

def _print_ideas(items: List[Dict[str, Any]]) -> None:
    table = Table(title="Ideas", show_lines=True)
    table.add_column("ID", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Channel")
    table.add_column("Hook")
    table.add_column("Summary")
    for item in items:
        table.add_row(
            str(item.get("id", "")),
            str(item.get("title", "")),
            str(item.get("channel", "")),
            str(item.get("hook", "")),
            str(item.get("summary", "")),
        )
    console.print(table)


def _print_concept(content: Dict[str, Any]) -> None:
    fmt = content.get("channel_format") or {}
    kpi = content.get("kpi") or {}
    lines = [
        content.get("summary", ""),
        "",
        f"[bold]Channel:[/bold] {fmt.get('channel', '')} / {fmt.get('format', '')}",
        f"[bold]Insight:[/bold] {content.get('audience_insight', '')}",
        f"[bold]Key message:[/bold] {content.get('key_message', '')}",
        f"[bold]Hook:[/bold] {content.get('hook', '')}",
        f"[bold]CTA:[/bold] {content.get('cta', '')}",
        f"[bold]KPI:[/bold] {kpi.get('primary', '')} ({kpi.get('target', '')})",
        "[bold]Reasons to believe:[/bold]",
        *(f"  • {r}" for r in content.get("rtbs", [])),
        "[bold]Beats:[/bold]",
        *(f"  {i}. {b}" for i, b in enumerate(content.get("beats", []), 1)),
    ]
    console.print(Panel("\n".join(lines), title=content.get("title", "Concept")))


def _print_message(message: Dict[str, Any]) -> None:
    kind = message.get("type")
    content = message.get("content") or {}
    if kind == "idea_list":
        _print_ideas(content.get("items", []))
    elif kind == "concept":
        _print_concept(content)
    else:
        who = "You" if message.get("role") == "user" else "Agent"
        rprint(f"[bold]{who}:[/bold] {content.get('text', '')}")


def _print_turn(message: Dict[str, Any], persisted: bool) -> None:
    _print_message(message)
    if not persisted:
        rprint("[yellow]Warning:[/yellow] reply could not be stored.")


# ── init ─────────────────────────────────────────────────────────────────────

EXAMPLE_CONTEXT = '''# Session context for campaign-agent
organization:
  name: "Northpeak Outfitters"
  description: "Independent outdoor brand, plain-spoken and practical"
product:
  name: "Ridge Runner trail shoe"
  description: "Lightweight trail shoe with a rock plate and fast-drying mesh"
audience:
  name: "Weekend trail runners"
  age_range: "25-40"
  location: "Pacific Northwest"
  interests:
    - trail running
    - hiking
    - outdoor photography
  tone: "Energetic"
objective: "Awareness"  # Awareness | Engagement | Conversion
'''


@app.command()
def init(
    output_dir: str = typer.Option(".", "-o", "--output", help="Directory to create the file in."),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file."),
) -> None:
    """Create a starter context.yaml."""
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    path = out / "context.yaml"
    if path.exists() and not force:
        rprint(f"[yellow]Skipped:[/yellow] {path} already exists (use --force to overwrite)")
        raise typer.Exit(0)
    path.write_text(EXAMPLE_CONTEXT, encoding="utf-8")
    rprint(f"[green]Created:[/green] {path}")
    rprint(f"Next: [bold]campaign ideas {path} \"10 ideas for a spring launch\"[/bold]")


# ── ideas ────────────────────────────────────────────────────────────────────

@app.command()
def ideas(
    context_path: str = typer.Argument(..., help="Path to a YAML session context."),
    prompt: str = typer.Argument(..., help="What you need, e.g. '10 ideas for a launch'."),
    output: Optional[str] = typer.Option(None, "-o", "--output", help="Local session directory."),
) -> None:
    """Start a session from a context file and answer the first prompt."""
    path = Path(context_path)
    if not path.exists():
        rprint(f"[red]Error:[/red] Context file not found: {path}")
        raise typer.Exit(1)

    try:
        context = SessionContext.model_validate(yaml.safe_load(path.read_text(encoding="utf-8")))
    except Exception as exc:
        rprint(f"[red]Error:[/red] Invalid context: {exc}")
        raise typer.Exit(1)

    store = _make_store(output)
    provider = _make_provider()

    rprint(f"[blue]Thinking about[/blue] [bold]{context.product.name}[/bold]...")
    try:
        started = start_session(prompt, context, provider, store)
    except (RequestValidationError, PersistenceError) as exc:
        rprint(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)

    _print_turn(started.turn.message, started.turn.persisted)
    rprint(f"[green]Session:[/green] {started.session.id}")


# ── develop / ask ────────────────────────────────────────────────────────────

@app.command()
def develop(
    session_id: str = typer.Argument(..., help="Session ID."),
    idea_id: str = typer.Argument(..., help="Idea ID from the session, e.g. idea_3."),
    output: Optional[str] = typer.Option(None, "-o", "--output", help="Local session directory."),
) -> None:
    """Develop one idea from the session into a full concept."""
    store = _make_store(output)
    session = _load_session(store, session_id)

    idea = _find_idea(store.list_messages(session_id), idea_id)
    if idea is None:
        rprint(f"[red]Error:[/red] Idea not found in session: {idea_id}")
        raise typer.Exit(1)

    provider = _make_provider()
    rprint(f"[blue]Developing[/blue] [bold]{idea.title}[/bold]...")
    result = handle_turn(
        AgentRequest(
            session_id=session_id,
            context=SessionContext.model_validate(session.context),
            user_input=f"Develop this idea: {idea.title}",
            selected_idea=idea,
        ),
        provider,
        store,
    )
    _print_turn(result.message, result.persisted)


@app.command()
def ask(
    session_id: str = typer.Argument(..., help="Session ID."),
    text: str = typer.Argument(..., help="Your message."),
    output: Optional[str] = typer.Option(None, "-o", "--output", help="Local session directory."),
) -> None:
    """Send a free-form turn to the session."""
    store = _make_store(output)
    session = _load_session(store, session_id)
    provider = _make_provider()

    result = handle_turn(
        AgentRequest(
            session_id=session_id,
            context=SessionContext.model_validate(session.context),
            user_input=text,
        ),
        provider,
        store,
    )
    _print_turn(result.message, result.persisted)


# ── sessions / show ──────────────────────────────────────────────────────────

@app.command()
def sessions(
    output: Optional[str] = typer.Option(None, "-o", "--output", help="Local session directory."),
    n: int = typer.Option(20, "--n", "-n", help="Number of recent sessions to show."),
) -> None:
    """List recent sessions."""
    store = _make_store(output)
    records = store.list_sessions(limit=n)
    if not records:
        rprint("[dim]No sessions found.[/dim]")
        raise typer.Exit(0)

    table = Table(title="Recent Sessions", show_lines=False)
    table.add_column("Session ID", style="dim")
    table.add_column("Prompt")
    table.add_column("Product")
    table.add_column("Audience")
    table.add_column("Objective")
    table.add_column("Ideas", justify="right")
    table.add_column("Concepts", justify="right")
    table.add_column("Created")
    for record in records:
        s = summarize_session(record, store.list_messages(record.id))
        table.add_row(
            s.id, s.prompt, s.product, s.audience, s.objective,
            str(s.ideas_count), str(s.developed_count), s.age,
        )
    console.print(table)


@app.command()
def show(
    session_id: str = typer.Argument(..., help="Session ID."),
    output: Optional[str] = typer.Option(None, "-o", "--output", help="Local session directory."),
    raw: bool = typer.Option(False, "--json", help="Print the raw message log as JSON."),
) -> None:
    """Print the conversation log of a session."""
    store = _make_store(output)
    _load_session(store, session_id)
    messages = store.list_messages(session_id)

    if raw:
        console.print_json(json.dumps([m.model_dump() for m in messages], ensure_ascii=False))
        return
    for message in messages:
        _print_message(message.model_dump())


if __name__ == "__main__":
    app()
