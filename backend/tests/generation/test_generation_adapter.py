"""Tests for GenerationAdapter.

Covers:
- Happy path for every kind via FakeLLMClient
- Title from the PRD reply, derived "<Label>: <input>" title for tool kinds
- Story id backfill
- Every failure mode maps to UpstreamGenerationError with the cause chained
- Exactly one model call per request (no retry)
- rewrite_section success and failure
"""

import json

import pytest

from prdforge.core.exceptions import SchemaValidationError, UpstreamGenerationError
from prdforge.generation.adapter import GenerationAdapter, derive_title, split_rewritten_list
from prdforge.generation.llm_fake import FakeLLMClient
from prdforge.generation.prompts import PRD_SYSTEM_PROMPT, REWRITE_SYSTEM_PROMPT
from prdforge.schemas.generation import parse_generation_input
from prdforge.schemas.payloads import ArtifactKind

pytestmark = pytest.mark.unit

IDEA = "A mobile app that tracks grocery expiry dates for small stores"

VALID_BODIES = {
    ArtifactKind.PRD: {"idea": IDEA},
    ArtifactKind.USER_STORIES: {"featureIdea": "Export weekly report as CSV"},
    ArtifactKind.PROBLEM_REFINER: {"problem": "Users churn right after onboarding"},
    ArtifactKind.FEATURE_PRIORITIZER: {"features": ["Dark mode", "SSO"]},
    ArtifactKind.SPRINT_PLANNER: {"backlog": "Checkout page, webhook handler, invoice emails"},
    ArtifactKind.INTERVIEW_PREP: {"question": "How would you improve Google Maps?"},
}


def _request(kind: ArtifactKind, **overrides):
    return parse_generation_input(kind, {**VALID_BODIES[kind], **overrides})


class TestGenerateHappyPath:
    @pytest.mark.parametrize("kind", list(ArtifactKind))
    async def test_every_kind_generates(self, kind, fake_llm):
        adapter = GenerationAdapter(fake_llm)

        result = await adapter.generate(kind, _request(kind))

        assert result.title
        assert isinstance(result.payload, dict)
        assert fake_llm.call_count == 1

    async def test_prd_title_comes_from_reply(self, fake_llm):
        result = await GenerationAdapter(fake_llm).generate(ArtifactKind.PRD, _request(ArtifactKind.PRD))

        assert result.title == "ShelfLife"
        assert "title" not in result.payload

    async def test_missing_story_ids_backfilled(self, fake_llm):
        result = await GenerationAdapter(fake_llm).generate(ArtifactKind.PRD, _request(ArtifactKind.PRD))

        assert [story["id"] for story in result.payload["userStories"]] == ["us-1", "us-2"]

    async def test_tool_title_derived_from_input(self):
        fake = FakeLLMClient(replies=['{"refinedStatement": "X"}'])
        problem = "Users churn right after onboarding because setup takes five screens and an API key"

        result = await GenerationAdapter(fake).generate(
            ArtifactKind.PROBLEM_REFINER, _request(ArtifactKind.PROBLEM_REFINER, problem=problem)
        )

        assert result.title == f"Refined Problem: {problem[:60]}"
        assert result.payload["refinedStatement"] == "X"
        assert result.payload["originalProblem"] == ""
        assert result.payload["successCriteria"] == []

    async def test_fenced_reply_accepted(self):
        fake = FakeLLMClient(replies=['```json\n{"title": "Fenced", "goals": ["g"]}\n```'])

        result = await GenerationAdapter(fake).generate(ArtifactKind.PRD, _request(ArtifactKind.PRD))

        assert result.title == "Fenced"
        assert result.payload["goals"] == ["g"]

    async def test_prompt_embeds_input_and_model(self, fake_llm):
        await GenerationAdapter(fake_llm).generate(
            ArtifactKind.PRD, _request(ArtifactKind.PRD, model="claude-opus-4-20250514")
        )

        call = fake_llm.calls[0]
        assert call.system == PRD_SYSTEM_PROMPT
        assert IDEA in call.user
        assert '"problemStatement"' in call.user
        assert call.model == "claude-opus-4-20250514"

    async def test_prioritizer_prompt_numbers_features(self, fake_llm):
        await GenerationAdapter(fake_llm).generate(
            ArtifactKind.FEATURE_PRIORITIZER, _request(ArtifactKind.FEATURE_PRIORITIZER)
        )

        assert "1. Dark mode\n2. SSO" in fake_llm.calls[0].user

    async def test_prioritizer_reply_sorted_and_recomputed(self, fake_llm):
        result = await GenerationAdapter(fake_llm).generate(
            ArtifactKind.FEATURE_PRIORITIZER, _request(ArtifactKind.FEATURE_PRIORITIZER)
        )

        assert [f["name"] for f in result.payload["features"]] == ["SSO", "Dark mode"]
        assert result.payload["features"][0]["riceScore"] == 96.0

    async def test_non_finite_scores_degrade_to_defaults(self):
        fake = FakeLLMClient(replies=['{"features": [{"name": "Dark mode", "reach": NaN, "impact": "nan"}]}'])

        result = await GenerationAdapter(fake).generate(
            ArtifactKind.FEATURE_PRIORITIZER, _request(ArtifactKind.FEATURE_PRIORITIZER)
        )

        feature = result.payload["features"][0]
        assert (feature["reach"], feature["impact"]) == (5, 5)
        assert feature["riceScore"] == 25.0

    async def test_long_prd_title_truncated(self):
        fake = FakeLLMClient(replies=[json.dumps({"title": "T" * 300})])

        result = await GenerationAdapter(fake).generate(ArtifactKind.PRD, _request(ArtifactKind.PRD))

        assert result.title == "T" * 255


class TestGenerateFailures:
    @pytest.mark.parametrize(
        ("scenario", "cause_type"),
        [
            ("llm_failure", RuntimeError),
            ("malformed_json", json.JSONDecodeError),
            ("empty_response", ValueError),
        ],
    )
    async def test_scenarios_raise_upstream_error(self, scenario, cause_type):
        fake = FakeLLMClient(scenario=scenario)

        with pytest.raises(UpstreamGenerationError) as exc_info:
            await GenerationAdapter(fake).generate(ArtifactKind.PRD, _request(ArtifactKind.PRD))

        assert exc_info.value.message == "Failed to generate PRD"
        assert isinstance(exc_info.value.__cause__, cause_type)
        assert fake.call_count == 1  # no retry

    async def test_schema_mismatch_raises_upstream_error(self):
        fake = FakeLLMClient(replies=['{"userStories": "not a list"}'])

        with pytest.raises(UpstreamGenerationError) as exc_info:
            await GenerationAdapter(fake).generate(ArtifactKind.USER_STORIES, _request(ArtifactKind.USER_STORIES))

        assert exc_info.value.message == "Failed to generate User Stories"
        assert isinstance(exc_info.value.__cause__, SchemaValidationError)
        assert exc_info.value.__cause__.field_path == "userStories"

    async def test_top_level_array_rejected(self):
        fake = FakeLLMClient(replies=['[{"refinedStatement": "X"}]'])

        with pytest.raises(UpstreamGenerationError) as exc_info:
            await GenerationAdapter(fake).generate(
                ArtifactKind.PROBLEM_REFINER, _request(ArtifactKind.PROBLEM_REFINER)
            )

        assert exc_info.value.__cause__.field_path == "$"


class TestRewriteSection:
    async def test_returns_rewritten_content(self):
        fake = FakeLLMClient(replies=['{"rewrittenContent": "Shorter."}'])

        result = await GenerationAdapter(fake).rewrite_section(
            "problemStatement", "A long problem.", "Make it shorter"
        )

        assert result == "Shorter."
        assert fake.calls[0].system == REWRITE_SYSTEM_PROMPT
        assert "Make it shorter" in fake.calls[0].user
        assert "A long problem." in fake.calls[0].user

    async def test_missing_key_raises(self):
        fake = FakeLLMClient(replies=['{"content": "Shorter."}'])

        with pytest.raises(UpstreamGenerationError) as exc_info:
            await GenerationAdapter(fake).rewrite_section("goals", "- a", "Make it shorter")

        assert exc_info.value.message == "Failed to rewrite section"

    async def test_transport_error_raises(self, fake_llm_failing):
        with pytest.raises(UpstreamGenerationError) as exc_info:
            await GenerationAdapter(fake_llm_failing).rewrite_section("goals", "- a", "Make it shorter")

        assert isinstance(exc_info.value.__cause__, RuntimeError)


class TestHelpers:
    def test_split_rewritten_list(self):
        text = "- First goal\n* Second goal\n\n• Third goal\n1. Fourth goal\n2) Fifth goal\nSixth goal\n   \n"
        assert split_rewritten_list(text) == [
            "First goal",
            "Second goal",
            "Third goal",
            "Fourth goal",
            "Fifth goal",
            "Sixth goal",
        ]

    def test_split_keeps_inner_hyphens(self):
        assert split_rewritten_list("- Self-serve onboarding") == ["Self-serve onboarding"]

    def test_derive_title_truncates_and_collapses_whitespace(self):
        title = derive_title(ArtifactKind.FEATURE_PRIORITIZER, "SSO\nDark mode")
        assert title == "Feature Prioritization: SSO Dark mode"
        assert derive_title(ArtifactKind.SPRINT_PLANNER, "x" * 100) == "Sprint Plan: " + "x" * 60
