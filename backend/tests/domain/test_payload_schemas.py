"""Tests for payload validation and normalization of model replies.

Covers:
- Every kind has a model and validates an empty object to full defaults
- Nulls count as missing, unknown keys are dropped
- Wrong container types fail with the first dotted path
- priority/severity/recommendation fall back instead of failing
- RICE inputs are clamped and riceScore is recomputed, features sorted
"""

import json

import pytest

from prdforge.core.exceptions import SchemaValidationError
from prdforge.schemas.payloads import (
    KIND_LABELS,
    PAYLOAD_MODELS,
    TITLE_MAX_LENGTH,
    ArtifactKind,
    dump_payload,
    rewritable_sections,
    validate_payload,
)

pytestmark = pytest.mark.unit


EXPECTED_DEFAULTS = {
    ArtifactKind.PRD: {
        "problemStatement": "",
        "targetAudience": "",
        "goals": [],
        "features": [],
        "successMetrics": [],
        "userStories": [],
        "outOfScope": [],
        "assumptions": [],
    },
    ArtifactKind.USER_STORIES: {"userStories": []},
    ArtifactKind.PROBLEM_REFINER: {
        "originalProblem": "",
        "refinedStatement": "",
        "context": "",
        "impact": "",
        "affectedUsers": "",
        "currentSolutions": "",
        "proposedApproach": "",
        "successCriteria": [],
    },
    ArtifactKind.FEATURE_PRIORITIZER: {"features": [], "summary": ""},
    ArtifactKind.SPRINT_PLANNER: {
        "sprintGoal": "",
        "duration": "",
        "capacity": "",
        "totalPoints": 0,
        "stories": [],
        "risks": [],
        "recommendations": [],
    },
    ArtifactKind.INTERVIEW_PREP: {
        "question": "",
        "framework": "",
        "structuredAnswer": "",
        "keyPoints": [],
        "exampleScenario": "",
        "followUpQuestions": [],
        "tips": [],
        "feedback": "",
    },
}


class TestRegistry:
    def test_every_kind_has_a_model_and_label(self):
        assert set(PAYLOAD_MODELS) == set(ArtifactKind)
        assert set(KIND_LABELS) == set(ArtifactKind)

    @pytest.mark.parametrize("kind", list(ArtifactKind))
    def test_empty_object_gets_all_defaults(self, kind):
        assert dump_payload(validate_payload(kind, {})) == EXPECTED_DEFAULTS[kind]


class TestDefaults:
    def test_prd_title_defaults_when_missing(self):
        assert validate_payload(ArtifactKind.PRD, {}).title == "Untitled PRD"

    def test_prd_title_defaults_when_blank(self):
        assert validate_payload(ArtifactKind.PRD, {"title": "   "}).title == "Untitled PRD"

    def test_prd_title_is_not_stored_in_payload(self):
        payload = dump_payload(validate_payload(ArtifactKind.PRD, {"title": "ShelfLife"}))
        assert "title" not in payload

    def test_problem_refiner_partial_reply(self):
        payload = dump_payload(validate_payload(ArtifactKind.PROBLEM_REFINER, {"refinedStatement": "X"}))
        assert payload["refinedStatement"] == "X"
        assert payload["originalProblem"] == ""
        assert payload["proposedApproach"] == ""
        assert payload["successCriteria"] == []

    def test_null_values_count_as_missing(self):
        payload = dump_payload(validate_payload(ArtifactKind.PRD, {"goals": None, "targetAudience": None}))
        assert payload["goals"] == []
        assert payload["targetAudience"] == ""

    def test_unknown_keys_dropped(self):
        payload = dump_payload(validate_payload(ArtifactKind.USER_STORIES, {"userStories": [], "confidence": 0.9}))
        assert payload == {"userStories": []}

    def test_user_story_defaults(self):
        payload = dump_payload(validate_payload(ArtifactKind.USER_STORIES, {"userStories": [{"title": "Login"}]}))
        assert payload["userStories"][0] == {
            "id": "",
            "title": "Login",
            "description": "",
            "acceptanceCriteria": [],
            "priority": "medium",
            "edgeCases": [],
        }

    def test_numbers_in_text_fields_are_stringified(self):
        payload = validate_payload(ArtifactKind.SPRINT_PLANNER, {"duration": 2})
        assert payload.duration == "2"


class TestStructuralErrors:
    @pytest.mark.parametrize("value", [[1, 2], "a string", 42, None])
    def test_non_object_top_level(self, value):
        with pytest.raises(SchemaValidationError) as exc_info:
            validate_payload(ArtifactKind.PRD, value)
        assert exc_info.value.field_path == "$"
        assert exc_info.value.expected == "object"

    def test_string_where_list_required(self):
        with pytest.raises(SchemaValidationError) as exc_info:
            validate_payload(ArtifactKind.PRD, {"goals": "ship it"})
        assert exc_info.value.field_path == "goals"
        assert exc_info.value.expected == "array"

    def test_nested_path_reported(self):
        data = {"userStories": [{"title": "ok"}, {"title": "bad", "acceptanceCriteria": "not a list"}]}
        with pytest.raises(SchemaValidationError) as exc_info:
            validate_payload(ArtifactKind.USER_STORIES, data)
        assert exc_info.value.field_path == "userStories.1.acceptanceCriteria"

    def test_list_where_string_required(self):
        with pytest.raises(SchemaValidationError) as exc_info:
            validate_payload(ArtifactKind.PROBLEM_REFINER, {"context": ["a", "b"]})
        assert exc_info.value.field_path == "context"
        assert exc_info.value.expected == "string"


class TestEnumPermissiveness:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("high", "high"), ("HIGH", "high"), (" Low ", "low"), ("urgent", "medium"), (3, "medium")],
    )
    def test_story_priority(self, raw, expected):
        payload = validate_payload(ArtifactKind.USER_STORIES, {"userStories": [{"priority": raw}]})
        assert payload.user_stories[0].priority == expected

    def test_risk_severity_falls_back(self):
        payload = validate_payload(ArtifactKind.SPRINT_PLANNER, {"risks": [{"risk": "Scope", "severity": "critical"}]})
        assert payload.risks[0].severity == "medium"

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Must Have", "Must Have"),
            ("must", "Must Have"),
            ("should-have", "Should Have"),
            ("wont", "Won't Have"),
            ("Won’t Have", "Won't Have"),
            ("maybe later", "Could Have"),
        ],
    )
    def test_recommendation(self, raw, expected):
        payload = validate_payload(ArtifactKind.FEATURE_PRIORITIZER, {"features": [{"recommendation": raw}]})
        assert payload.features[0].recommendation == expected


class TestRice:
    def test_scores_clamped_and_defaulted(self):
        payload = validate_payload(
            ArtifactKind.FEATURE_PRIORITIZER,
            {"features": [{"name": "SSO", "reach": 20, "impact": "abc", "confidence": "7", "effort": 0}]},
        )
        feature = payload.features[0]
        assert (feature.reach, feature.impact, feature.confidence, feature.effort) == (10, 5, 7, 1)

    def test_rice_score_is_recomputed(self):
        payload = validate_payload(
            ArtifactKind.FEATURE_PRIORITIZER,
            {"features": [{"name": "SSO", "reach": 8, "impact": 9, "confidence": 8, "effort": 6, "riceScore": 999}]},
        )
        assert payload.features[0].rice_score == 96.0

    def test_rice_score_rounded_to_one_decimal(self):
        payload = validate_payload(
            ArtifactKind.FEATURE_PRIORITIZER,
            {"features": [{"reach": 5, "impact": 5, "confidence": 5, "effort": 3}]},
        )
        assert payload.features[0].rice_score == 41.7

    def test_non_numeric_rice_score_ignored(self):
        payload = validate_payload(
            ArtifactKind.FEATURE_PRIORITIZER,
            {"features": [{"reach": 2, "impact": 2, "confidence": 2, "effort": 2, "riceScore": "high"}]},
        )
        assert payload.features[0].rice_score == 4.0

    def test_features_sorted_by_rice_descending(self):
        payload = dump_payload(
            validate_payload(
                ArtifactKind.FEATURE_PRIORITIZER,
                {
                    "features": [
                        {"name": "Dark mode", "reach": 6, "impact": 3, "confidence": 9, "effort": 2},
                        {"name": "SSO", "reach": 8, "impact": 9, "confidence": 8, "effort": 6},
                    ]
                },
            )
        )
        assert [f["name"] for f in payload["features"]] == ["SSO", "Dark mode"]
        assert [f["riceScore"] for f in payload["features"]] == [96.0, 81.0]


class TestCounts:
    @pytest.mark.parametrize(("raw", "expected"), [(13, 13), ("8", 8), (-3, 0), (4.6, 5), ("lots", 0)])
    def test_story_points(self, raw, expected):
        payload = validate_payload(ArtifactKind.SPRINT_PLANNER, {"stories": [{"storyPoints": raw}]})
        assert payload.stories[0].story_points == expected


class TestNonFiniteNumbers:
    @pytest.mark.parametrize("raw", [float("nan"), float("inf"), float("-inf"), "nan", "Infinity", 10**400])
    def test_scores_fall_back_to_default(self, raw):
        payload = validate_payload(ArtifactKind.FEATURE_PRIORITIZER, {"features": [{"name": "A", "reach": raw}]})

        assert payload.features[0].reach == 5
        assert payload.features[0].rice_score == 25.0

    def test_nan_reply_parsed_by_json_module(self):
        data = json.loads('{"features": [{"name": "A", "reach": NaN, "effort": Infinity}]}')

        feature = validate_payload(ArtifactKind.FEATURE_PRIORITIZER, data).features[0]

        assert (feature.reach, feature.effort) == (5, 5)

    @pytest.mark.parametrize("raw", [float("nan"), float("inf"), "-inf", 10**400])
    def test_counts_fall_back_to_zero(self, raw):
        payload = validate_payload(ArtifactKind.SPRINT_PLANNER, {"totalPoints": raw, "stories": [{"storyPoints": raw}]})

        assert payload.total_points == 0
        assert payload.stories[0].story_points == 0

    def test_non_finite_rice_score_ignored(self):
        payload = validate_payload(
            ArtifactKind.FEATURE_PRIORITIZER,
            {"features": [{"reach": 2, "impact": 2, "confidence": 2, "effort": 2, "riceScore": float("nan")}]},
        )
        assert payload.features[0].rice_score == 4.0


class TestPrdTitleLength:
    def test_long_title_truncated_to_column_width(self):
        payload = validate_payload(ArtifactKind.PRD, {"title": "  " + "x" * 400 + "  "})

        assert payload.title == "x" * TITLE_MAX_LENGTH

    def test_short_title_kept(self):
        assert validate_payload(ArtifactKind.PRD, {"title": "ShelfLife"}).title == "ShelfLife"


class TestRewritableSections:
    def test_prd_sections(self):
        sections = rewritable_sections(ArtifactKind.PRD)
        assert sections["problemStatement"] == "text"
        assert sections["goals"] == "list"
        assert "userStories" not in sections
        assert "title" not in sections

    def test_prioritizer_only_summary(self):
        assert rewritable_sections(ArtifactKind.FEATURE_PRIORITIZER) == {"summary": "text"}
