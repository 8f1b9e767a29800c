"""FakeLLMClient: scenario-based test double for the LLMClient protocol.

Provides deterministic, instant responses for named scenarios:
- happy_path: realistic JSON for whichever prompt was sent
- llm_failure: the transport raises
- malformed_json: the reply is prose, not JSON
- empty_response: the reply is an empty string

Queued replies (``replies=[...]``) take precedence over the scenario and are
returned in order, one per call. Every call is recorded in ``calls``.
"""

import json
from dataclasses import dataclass

from prdforge.generation.prompts import PROMPTS, REWRITE_SYSTEM_PROMPT
from prdforge.schemas.payloads import ArtifactKind


@dataclass(frozen=True)
class RecordedCall:
    system: str
    user: str
    model: str | None


_CANNED: dict[ArtifactKind, dict] = {
    ArtifactKind.PRD: {
        "title": "ShelfLife",
        "problemStatement": "Small grocers throw away 8% of perishable stock because expiry dates are tracked on paper.",
        "targetAudience": "Independent grocery owners with one to three locations.",
        "goals": ["Cut perishable waste by 30% in six months", "Reduce stock-check time to under 10 minutes a day"],
        "features": ["Barcode scan intake", "Expiry alerts", "Markdown suggestions"],
        "successMetrics": ["Weekly waste value", "Daily active stores"],
        "userStories": [
            {
                "id": "us-1",
                "title": "Scan deliveries",
                "description": "As a store owner, I want to scan deliveries so that expiry dates are captured automatically.",
                "acceptanceCriteria": ["Scanning a barcode records product and expiry", "Duplicate scans are merged"],
                "priority": "high",
            },
            {
                "title": "Expiry alerts",
                "description": "As a store owner, I want alerts two days before expiry so that I can discount stock.",
                "acceptanceCriteria": ["Alert is sent at 8am local time"],
                "priority": "medium",
            },
        ],
        "outOfScope": ["Multi-location sync"],
        "assumptions": ["Stores have a smartphone with a camera"],
    },
    ArtifactKind.USER_STORIES: {
        "userStories": [
            {
                "id": "us-1",
                "title": "Export report",
                "description": "As an analyst, I want to export the weekly report so that I can share it offline.",
                "acceptanceCriteria": ["CSV download contains every visible column"],
                "priority": "high",
                "edgeCases": ["Report with zero rows"],
            }
        ]
    },
    ArtifactKind.PROBLEM_REFINER: {
        "originalProblem": "Users churn after onboarding.",
        "refinedStatement": "40% of trial users never finish project setup in their first session.",
        "context": "Setup requires five screens and an API key.",
        "impact": "Lost conversions from trial to paid.",
        "affectedUsers": "New self-serve trial users.",
        "currentSolutions": "Support emails a setup guide after 48 hours.",
        "proposedApproach": "Defer the API key step until the first integration.",
        "successCriteria": ["Setup completion above 75%"],
    },
    ArtifactKind.FEATURE_PRIORITIZER: {
        "features": [
            {"name": "Dark mode", "reach": 6, "impact": 3, "confidence": 9, "effort": 2,
             "recommendation": "Could Have", "reasoning": "Frequently requested.", "tradeoffs": "Design time."},
            {"name": "SSO", "reach": 8, "impact": 9, "confidence": 8, "effort": 6,
             "recommendation": "Must Have", "reasoning": "Blocks enterprise deals.", "tradeoffs": "Delays reporting."},
        ],
        "summary": "Ship SSO first; dark mode is a cheap follow-up.",
    },
    ArtifactKind.SPRINT_PLANNER: {
        "sprintGoal": "Ship self-serve billing",
        "duration": "2 weeks",
        "capacity": "4 engineers, 32 points",
        "totalPoints": 21,
        "stories": [
            {"title": "Checkout page", "storyPoints": 8, "priority": "high", "assignmentSuggestion": "Frontend pair"},
            {"title": "Webhook handler", "storyPoints": 5, "priority": "high", "assignmentSuggestion": "Backend"},
        ],
        "risks": [{"risk": "Payment provider review", "severity": "high", "mitigation": "Submit on day one"}],
        "recommendations": ["Keep a 20% buffer for bugs"],
    },
    ArtifactKind.INTERVIEW_PREP: {
        "question": "How would you improve Google Maps?",
        "framework": "CIRCLES",
        "structuredAnswer": "Clarify the goal, pick a user segment, list their needs, then prioritize.",
        "keyPoints": ["Segment users before proposing solutions"],
        "exampleScenario": "Commuters who switch between transit and cycling.",
        "followUpQuestions": ["How would you measure success?"],
        "tips": ["Think out loud"],
        "feedback": "Avoid jumping straight to features.",
    },
}

_KIND_BY_SYSTEM_PROMPT = {system: kind for kind, (system, _template) in PROMPTS.items()}


class FakeLLMClient:
    """Scenario-based test double for LLMClient.

    Each scenario returns instantly with deterministic content, so tests can
    cover the success and every failure path of the adapter without network.
    """

    VALID_SCENARIOS = {"happy_path", "llm_failure", "malformed_json", "empty_response"}

    def __init__(self, scenario: str = "happy_path", replies: list[str] | None = None):
        if scenario not in self.VALID_SCENARIOS:
            raise ValueError(f"Unknown scenario: {scenario}. Valid scenarios: {self.VALID_SCENARIOS}")
        self.scenario = scenario
        self.replies = list(replies or [])
        self.calls: list[RecordedCall] = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def complete(self, system: str, user: str, *, model: str | None = None) -> str:
        self.calls.append(RecordedCall(system=system, user=user, model=model))

        if self.replies:
            return self.replies.pop(0)

        if self.scenario == "llm_failure":
            raise RuntimeError("Anthropic API rate limit exceeded. Retry after 60 seconds.")
        if self.scenario == "malformed_json":
            return "Sure! Here is your document: it has a title and some goals."
        if self.scenario == "empty_response":
            return ""

        if system == REWRITE_SYSTEM_PROMPT:
            return json.dumps({"rewrittenContent": "Rewritten content that is clearer and more concise."})
        kind = _KIND_BY_SYSTEM_PROMPT.get(system, ArtifactKind.PRD)
        return json.dumps(_CANNED[kind])
