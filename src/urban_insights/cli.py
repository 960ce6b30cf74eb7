import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError
from rich.console import Console

from urban_insights.artifacts.issues import collect_renderability_issues
from urban_insights.artifacts.sanitizer import (
    coerce_query_results,
    sanitize_artifact_content,
)
from urban_insights.artifacts.snapshots import build_artifact_data_snapshot
from urban_insights.config import AgentConfig, ArtifactConfig, SessionConfig
from urban_insights.db import SessionDB
from urban_insights.models.conversation import ConversationTurn, ExtractedArtifact
from urban_insights.models.report import Report
from urban_insights.models.ui import UINode
from urban_insights.output.console import ArtifactRenderer
from urban_insights.sessions import (
    load_chat_sessions,
    normalize_session,
    save_chat_sessions,
)

logger = logging.getLogger(__name__)
console = Console()

EXIT_NOT_RENDERABLE = 2
ARTIFACT_HELP = "Artifact JSON (ui, report, queryResults)"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="urban-insights",
        description="Renderability checks, data snapshots and session storage "
        "for agent-generated artifacts",
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    sub = p.add_subparsers(dest="command")

    # --- check ---
    check = sub.add_parser(
        "check", help="Prune an artifact and list renderability issues"
    )
    check.add_argument("artifact", type=Path, help=ARTIFACT_HELP)

    # --- snapshot ---
    snapshot = sub.add_parser(
        "snapshot", help="Build the data snapshot for an artifact"
    )
    snapshot.add_argument("artifact", type=Path, help=ARTIFACT_HELP)
    snapshot.add_argument(
        "-o", "--output", type=Path, default=None, help="Write JSON here"
    )

    # --- repair ---
    repair = sub.add_parser(
        "repair", help="Run one repair pass over a recorded conversation"
    )
    repair.add_argument(
        "conversation", type=Path, help="Conversation JSON (list of turns)"
    )
    repair.add_argument(
        "-o", "--output", type=Path, default=None, help="Write outcome JSON here"
    )
    repair.add_argument("--model", default=None, help="Override the agent model")

    # --- sessions ---
    sessions = sub.add_parser("sessions", help="Inspect persisted chat sessions")
    sessions.add_argument(
        "--db",
        type=Path,
        default=Path(SessionConfig().db_path),
        help="Session database path",
    )
    sessions_sub = sessions.add_subparsers(dest="sessions_command")
    sessions_sub.add_parser("list", help="List stored sessions, newest first")
    show = sessions_sub.add_parser("show", help="Show one stored session")
    show.add_argument("session_id", help="Session id")
    imp = sessions_sub.add_parser("import", help="Save sessions from a JSON export")
    imp.add_argument("path", type=Path, help="JSON array of sessions")
    imp.add_argument(
        "--quota",
        type=int,
        default=None,
        help="Reject writes larger than this many bytes",
    )

    return p


def _read_json(path: Path) -> Any:
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    return json.loads(path.read_text(encoding="utf-8"))


def _validate_optional(model: type[BaseModel], value: Any) -> Any:
    if value is None:
        return None
    try:
        return model.model_validate(value)
    except ValidationError as e:
        console.print(
            f"[yellow]Ignoring invalid {model.__name__}: "
            f"{e.error_count()} error(s)[/yellow]"
        )
        logger.debug("Invalid %s: %s", model.__name__, e)
        return None


def load_artifact_file(path: Path) -> ExtractedArtifact:
    raw = _read_json(path)
    if not isinstance(raw, dict):
        raise ValueError(f"{path} must contain a JSON object")
    results = raw.get("queryResults", raw.get("query_results"))
    if not isinstance(results, list):
        results = []
    return ExtractedArtifact(
        ui=_validate_optional(UINode, raw.get("ui")),
        report=_validate_optional(Report, raw.get("report")),
        query_results=coerce_query_results(results),
    )


def load_conversation_file(path: Path) -> list[ConversationTurn]:
    raw = _read_json(path)
    if isinstance(raw, dict):
        raw = raw.get("turns", [])
    if not isinstance(raw, list):
        raise ValueError(f"{path} must contain a list of turns")
    return [ConversationTurn.model_validate(turn) for turn in raw]


def _write_json(payload: Any, output: Path | None) -> None:
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    if output is None:
        console.print_json(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    console.print(f"[green]Saved to {output}[/green]")


def _run_check(args: argparse.Namespace) -> int:
    """Execute the check subcommand."""
    artifact = load_artifact_file(args.artifact)
    sanitized = sanitize_artifact_content(
        ui=artifact.ui, report=artifact.report, query_results=artifact.query_results
    )
    issues = collect_renderability_issues(
        ui=artifact.ui, report=artifact.report, query_results=artifact.query_results
    )
    ArtifactRenderer(console).render_check(sanitized, issues)
    return 0 if sanitized.has_renderable_content else EXIT_NOT_RENDERABLE


def _run_snapshot(args: argparse.Namespace) -> int:
    """Execute the snapshot subcommand."""
    artifact = load_artifact_file(args.artifact)
    snapshot = build_artifact_data_snapshot(
        ui=artifact.ui,
        report=artifact.report,
        query_results=artifact.query_results,
        config=ArtifactConfig(),
    )
    if args.output is not None:
        ArtifactRenderer(console).render_snapshot(snapshot)
    _write_json(snapshot, args.output)
    return 0


def _run_repair(args: argparse.Namespace) -> int:
    """Execute the repair subcommand."""
    from dotenv import load_dotenv

    from urban_insights.agent.claude import ClaudeArtifactAgent
    from urban_insights.agent.executors import ReplayQueryExecutor
    from urban_insights.agent.extraction import extract_query_results
    from urban_insights.agent.orchestrator import ArtifactRepairOrchestrator

    load_dotenv()

    api_key = os.environ.get("ANTHROPIC_API_KEY")
    if not api_key:
        console.print("[red]ANTHROPIC_API_KEY not set in environment or .env[/red]")
        return 1

    turns = load_conversation_file(args.conversation)
    config = AgentConfig(model=args.model) if args.model else AgentConfig()
    agent = ClaudeArtifactAgent(
        config=config,
        anthropic_key=api_key,
        executor=ReplayQueryExecutor(extract_query_results(turns)),
    )
    orchestrator = ArtifactRepairOrchestrator(agent)

    with console.status("[cyan]Checking artifact and requesting repair..."):
        outcome = asyncio.run(orchestrator.process(turns))

    ArtifactRenderer(console).render_repair(outcome)
    if args.output is not None:
        _write_json(outcome.model_dump(mode="json", by_alias=True), args.output)
    return 0 if outcome.artifact.has_renderable_content else EXIT_NOT_RENDERABLE


def _run_sessions(args: argparse.Namespace) -> int:
    """Execute the sessions subcommand."""
    if args.sessions_command is None:
        console.print("[red]Choose one of: list, show, import[/red]")
        return 1

    config = SessionConfig()
    db = SessionDB(args.db, quota_bytes=getattr(args, "quota", None))
    try:
        if args.sessions_command == "import":
            raw = _read_json(args.path)
            entries = raw if isinstance(raw, list) else []
            normalized = (normalize_session(e, config) for e in entries)
            sessions = [s for s in normalized if s is not None]
            if not save_chat_sessions(sessions, db, config):
                console.print("[red]Sessions could not be stored[/red]")
                return 1
            console.print(
                f"[green]Stored {len(sessions)} session(s) in {args.db}[/green]"
            )
            return 0

        sessions = load_chat_sessions(db, config)
        renderer = ArtifactRenderer(console)
        if args.sessions_command == "list":
            renderer.render_sessions(sessions)
            return 0

        match = next((s for s in sessions if s.id == args.session_id), None)
        if match is None:
            console.print(f"[red]Session not found: {args.session_id}[/red]")
            return 1
        renderer.render_session(match)
        return 0
    finally:
        db.close()


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

    try:
        if args.command == "check":
            code = _run_check(args)
        elif args.command == "snapshot":
            code = _run_snapshot(args)
        elif args.command == "repair":
            code = _run_repair(args)
        else:
            code = _run_sessions(args)
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled.[/yellow]")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        if args.verbose:
            import traceback

            traceback.print_exc()
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
