from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from urban_insights.models.conversation import RepairOutcome
from urban_insights.models.renderability import RenderabilityIssue, SanitizedArtifact
from urban_insights.models.session import ArtifactDataSnapshot, ChatSession
from urban_insights.models.ui import UINode


def _fmt_keys(keys: list[str]) -> str:
    return ", ".join(keys) if keys else "-"


def count_nodes(node: UINode | None) -> int:
    if node is None:
        return 0
    return 1 + sum(count_nodes(child) for child in node.children or [])


class ArtifactRenderer:
    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render_check(
        self, artifact: SanitizedArtifact, issues: list[RenderabilityIssue]
    ) -> None:
        self._render_summary(artifact)
        if issues:
            self.render_issues(issues)
        else:
            self.console.print("[green]No renderability issues.[/green]")

    def _render_summary(self, artifact: SanitizedArtifact) -> None:
        if artifact.has_renderable_content:
            status = "[bold green]renderable[/bold green]"
        else:
            status = "[bold red]nothing to render[/bold red]"
        lines = [f"Status: {status}"]
        lines.append(f"UI nodes kept: {count_nodes(artifact.ui)}")
        if artifact.report is not None:
            lines.append(
                f"Report: {artifact.report.title or '(untitled)'}"
                f" ({len(artifact.report.sections)} section(s) kept)"
            )
        rows = ", ".join(f"{k}={len(v)}" for k, v in artifact.data.items())
        lines.append(f"Query results: {rows or '-'}")
        self.console.print()
        self.console.print(Panel("\n".join(lines), title="Artifact", style="cyan"))

    def render_issues(self, issues: list[RenderabilityIssue]) -> None:
        table = Table(title=f"Renderability Issues ({len(issues)})", show_header=True)
        table.add_column("#", justify="right")
        table.add_column("Target", style="cyan")
        table.add_column("Component")
        table.add_column("Data Path")
        table.add_column("Required")
        table.add_column("Available")
        table.add_column("Error", style="red")
        for i, issue in enumerate(issues, 1):
            table.add_row(
                str(i),
                issue.target,
                issue.component_type,
                issue.data_path or "-",
                _fmt_keys(issue.required_keys),
                _fmt_keys(issue.available_keys),
                issue.message,
            )
        self.console.print(table)

    def render_snapshot(self, snapshot: ArtifactDataSnapshot) -> None:
        table = Table(title="Data Snapshot", show_header=True)
        table.add_column("Result Key", style="cyan")
        table.add_column("Rows", justify="right")
        table.add_column("Columns")
        for result_key, rows in snapshot.items():
            columns = list(rows[0]) if rows else []
            table.add_row(result_key, str(len(rows)), _fmt_keys(columns))
        self.console.print(table)

    def render_repair(self, outcome: RepairOutcome) -> None:
        if not outcome.repair_attempted:
            verdict = "[green]not needed[/green]"
        elif outcome.repair_accepted:
            verdict = "[green]accepted[/green]"
        else:
            verdict = "[yellow]discarded[/yellow]"
        self.console.print(
            f"Repair {verdict}: {len(outcome.issues_before)} issue(s) before, "
            f"{len(outcome.issues_after)} after"
        )
        self._render_summary(outcome.artifact)
        if outcome.issues_after:
            self.render_issues(outcome.issues_after)

    def render_sessions(self, sessions: list[ChatSession]) -> None:
        table = Table(title=f"Chat Sessions ({len(sessions)})", show_header=True)
        table.add_column("ID", style="cyan")
        table.add_column("Title")
        table.add_column("Updated")
        table.add_column("Messages", justify="right")
        table.add_column("Artifacts", justify="right")
        for session in sessions:
            table.add_row(
                session.id,
                session.title,
                session.updated_at,
                str(len(session.messages)),
                str(len(session.artifact_state.items)),
            )
        self.console.print(table)

    def render_session(self, session: ChatSession) -> None:
        self.console.print(
            Panel(
                f"[bold]{session.title}[/bold]\n"
                f"Created: {session.created_at}\nUpdated: {session.updated_at}",
                title=session.id,
                style="cyan",
            )
        )
        for message in session.messages:
            if message.tool_call is not None:
                self.console.print(
                    f"[dim]{message.role}[/dim] tool {message.tool_call.name}"
                )
            elif message.content.strip():
                self.console.print(f"[bold]{message.role}[/bold]: {message.content}")

        state = session.artifact_state
        for i, artifact in enumerate(state.items):
            marker = "*" if i == state.index else " "
            results = ", ".join(
                f"{r.result_key}={len(r.data)}{' (partial)' if r.partial else ''}"
                for r in artifact.query_results
            )
            snapshot = ", ".join(
                f"{k}={len(v)}" for k, v in (artifact.data_snapshot or {}).items()
            )
            self.console.print(
                f"{marker} artifact {i} [{artifact.type}] "
                f"results: {results or '-'}  snapshot: {snapshot or '-'}"
            )
