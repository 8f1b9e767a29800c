"""Idempotent seed data: one sample PRD for demo environments."""

from sqlalchemy import select

from prdforge.db.base import get_session_factory
from prdforge.db.models.artifact import Artifact
from prdforge.schemas.payloads import ArtifactKind, dump_payload, validate_payload

SAMPLE_PRD = {
    "title": "TaskFlow - Smart Task Management",
    "raw_input": (
        "A task management app that uses AI to automatically prioritize tasks and suggest optimal scheduling"
    ),
    "payload": {
        "problemStatement": (
            "Professionals struggle with managing multiple tasks and often spend too much time deciding "
            "what to work on next, leading to missed deadlines and reduced productivity."
        ),
        "targetAudience": (
            "Busy professionals, project managers and freelancers who juggle multiple projects "
            "and need intelligent task prioritization."
        ),
        "goals": [
            "Reduce time spent on task prioritization by 70%",
            "Improve user task completion rate by 40%",
            "Achieve 50,000 monthly active users within first year",
        ],
        "features": [
            "AI-powered task prioritization based on urgency, importance and deadlines",
            "Smart calendar integration for optimal task scheduling",
            "Natural language task input",
            "Progress analytics and productivity insights",
        ],
        "successMetrics": [
            "Daily active users and retention rate",
            "Average tasks completed per user per week",
            "Net Promoter Score (NPS)",
        ],
        "userStories": [
            {
                "id": "us-1",
                "title": "Quick Task Creation",
                "description": (
                    "As a busy professional, I want to quickly add tasks using natural language "
                    "so that I can capture ideas without breaking my workflow."
                ),
                "acceptanceCriteria": [
                    "User can type a task in natural language",
                    "AI extracts due date, priority and category",
                    "Task is created within 2 seconds",
                ],
                "priority": "high",
            },
            {
                "id": "us-2",
                "title": "Smart Daily Planning",
                "description": (
                    "As a user starting my day, I want the app to suggest an optimal task order "
                    "so that I can focus on execution rather than planning."
                ),
                "acceptanceCriteria": [
                    "Daily plan is generated from deadlines and priorities",
                    "User can accept, modify or regenerate the plan",
                ],
                "priority": "high",
            },
        ],
        "outOfScope": ["Team billing", "Offline mode"],
        "assumptions": ["Users already keep a digital calendar"],
    },
}


async def seed_sample_data() -> bool:
    """Insert the sample PRD if it does not already exist.

    Returns:
        True if a row was inserted
    """
    factory = get_session_factory()
    payload = dump_payload(validate_payload(ArtifactKind.PRD, SAMPLE_PRD["payload"]))

    async with factory() as session:
        result = await session.execute(
            select(Artifact.id).where(
                Artifact.kind == ArtifactKind.PRD.value,
                Artifact.title == SAMPLE_PRD["title"],
            )
        )
        if result.scalar_one_or_none() is not None:
            return False

        session.add(
            Artifact(
                kind=ArtifactKind.PRD.value,
                raw_input=SAMPLE_PRD["raw_input"],
                title=SAMPLE_PRD["title"],
                payload=payload,
                revision=1,
            )
        )
        await session.commit()
        return True
