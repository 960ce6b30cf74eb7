"""One-shot repair of artifacts whose bound components have nothing to render.

The orchestrator evaluates the artifact the agent produced, and when it finds
renderability issues it asks the agent for exactly one corrected render. The
corrected artifact replaces the original only when it has strictly fewer
issues and still renders whenever the original did; otherwise the original
stands and is sanitized as usual.
"""

import logging

from urban_insights.agent.base import BaseArtifactAgent
from urban_insights.agent.extraction import extract_artifact
from urban_insights.agent.prompts import build_repair_prompt
from urban_insights.artifacts.issues import collect_renderability_issues
from urban_insights.artifacts.sanitizer import sanitize_artifact_content
from urban_insights.artifacts.snapshots import build_artifact_data_snapshot
from urban_insights.config import ArtifactConfig
from urban_insights.models.conversation import (
    ConversationTurn,
    ExtractedArtifact,
    RepairOutcome,
)
from urban_insights.models.query import QueryResult
from urban_insights.models.renderability import RenderabilityIssue

logger = logging.getLogger(__name__)


def should_accept_repair(
    before: list[RenderabilityIssue], after: list[RenderabilityIssue]
) -> bool:
    return len(after) < len(before)


def merge_query_results(
    original: list[QueryResult], repaired: list[QueryResult]
) -> list[QueryResult]:
    """Results from the repair turn override originals with the same key."""
    merged = {r.result_key: r for r in original}
    for result in repaired:
        merged[result.result_key] = result
    return list(merged.values())


def _issues(artifact: ExtractedArtifact) -> list[RenderabilityIssue]:
    return collect_renderability_issues(
        ui=artifact.ui, report=artifact.report, query_results=artifact.query_results
    )


class ArtifactRepairOrchestrator:
    def __init__(
        self,
        agent: BaseArtifactAgent,
        artifact_config: ArtifactConfig | None = None,
    ) -> None:
        self.agent = agent
        self.artifact_config = artifact_config or ArtifactConfig()

    async def process(self, turns: list[ConversationTurn]) -> RepairOutcome:
        artifact = extract_artifact(turns)
        issues_before = _issues(artifact)
        chosen = artifact
        issues_after = issues_before
        final_turns = list(turns)
        attempted = False
        accepted = False

        if issues_before:
            attempted = True
            logger.info(
                "Artifact has %d renderability issue(s); requesting repair",
                len(issues_before),
            )
            repaired_turns = await self._request_repair(turns, issues_before)
            if repaired_turns is not None:
                repaired = extract_artifact(repaired_turns)
                candidate = ExtractedArtifact(
                    ui=repaired.ui,
                    report=repaired.report,
                    query_results=merge_query_results(
                        artifact.query_results, repaired.query_results
                    ),
                )
                candidate_issues = _issues(candidate)
                if self._keeps_content(artifact, candidate) and should_accept_repair(
                    issues_before, candidate_issues
                ):
                    logger.info(
                        "Repair accepted: %d -> %d issue(s)",
                        len(issues_before),
                        len(candidate_issues),
                    )
                    chosen = candidate
                    issues_after = candidate_issues
                    final_turns = repaired_turns
                    accepted = True
                else:
                    logger.info(
                        "Repair discarded: %d -> %d issue(s)",
                        len(issues_before),
                        len(candidate_issues),
                    )

        sanitized = sanitize_artifact_content(
            ui=chosen.ui, report=chosen.report, query_results=chosen.query_results
        )
        snapshot = build_artifact_data_snapshot(
            ui=sanitized.ui,
            report=sanitized.report,
            query_results=chosen.query_results,
            config=self.artifact_config,
        )
        return RepairOutcome(
            artifact=sanitized,
            query_results=chosen.query_results,
            data_snapshot=snapshot,
            issues_before=issues_before,
            issues_after=issues_after,
            repair_attempted=attempted,
            repair_accepted=accepted,
            turns=final_turns,
        )

    @staticmethod
    def _keeps_content(
        original: ExtractedArtifact, candidate: ExtractedArtifact
    ) -> bool:
        """A repair may not trade renderable content for an empty artifact."""
        if candidate.is_empty:
            return False
        before = sanitize_artifact_content(
            ui=original.ui,
            report=original.report,
            query_results=original.query_results,
        )
        if not before.has_renderable_content:
            return True
        after = sanitize_artifact_content(
            ui=candidate.ui,
            report=candidate.report,
            query_results=candidate.query_results,
        )
        return after.has_renderable_content

    async def _request_repair(
        self, turns: list[ConversationTurn], issues: list[RenderabilityIssue]
    ) -> list[ConversationTurn] | None:
        prompt = ConversationTurn(role="user", content=build_repair_prompt(issues))
        try:
            run = await self.agent.run([*turns, prompt])
        except Exception:
            logger.warning(
                "Repair request to %s failed", self.agent.name, exc_info=True
            )
            return None
        return run.turns
