"""Pydantic payload schemas for the six artifact kinds.

Each kind has one payload model registered in PAYLOAD_MODELS. Models are
lenient about narrative fields (every field has a default, nulls count as
missing, unknown keys are dropped) but strict about structure: a value of
the wrong container type fails with SchemaValidationError naming the first
bad field path.

Enum permissiveness:
- priority / severity outside {high, medium, low} fall back to "medium"
- recommendation outside the MoSCoW set falls back to "Could Have"
RICE inputs are clamped to [1, 10] and riceScore is always recomputed.
"""

import math
from enum import StrEnum
from typing import Annotated, Any, ClassVar, Literal, get_args, get_origin

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from prdforge.core.exceptions import SchemaValidationError


class ArtifactKind(StrEnum):
    """Artifact kinds, one per generation tool."""

    PRD = "prd"
    USER_STORIES = "user-stories"
    PROBLEM_REFINER = "problem-refiner"
    FEATURE_PRIORITIZER = "feature-prioritizer"
    SPRINT_PLANNER = "sprint-planner"
    INTERVIEW_PREP = "interview-prep"


KIND_LABELS: dict[ArtifactKind, str] = {
    ArtifactKind.PRD: "PRD",
    ArtifactKind.USER_STORIES: "User Stories",
    ArtifactKind.PROBLEM_REFINER: "Refined Problem",
    ArtifactKind.FEATURE_PRIORITIZER: "Feature Prioritization",
    ArtifactKind.SPRINT_PLANNER: "Sprint Plan",
    ArtifactKind.INTERVIEW_PREP: "Interview Prep",
}

LEVELS = ("high", "medium", "low")
MOSCOW = ("Must Have", "Should Have", "Could Have", "Won't Have")

SCORE_MIN = 1
SCORE_MAX = 10
SCORE_DEFAULT = 5

# Matches the artifacts.title column width
TITLE_MAX_LENGTH = 255


# ==================== COERCION HELPERS ====================


def _coerce_text(value: Any) -> Any:
    # Models sometimes emit numbers for short text fields ("duration": 2)
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return str(value)
    return value


def _normalize_level(value: Any) -> str:
    if isinstance(value, str) and value.strip().lower() in LEVELS:
        return value.strip().lower()
    return "medium"


def _normalize_recommendation(value: Any) -> str:
    if not isinstance(value, str):
        return "Could Have"
    key = value.strip().lower().replace("’", "'").replace("-", " ").replace("_", " ")
    key = " ".join(key.split())
    for label in MOSCOW:
        short = label.lower().split()[0]  # "must", "should", "could", "won't"
        if key in (label.lower(), short, short.replace("'", ""), label.lower().replace("'", "")):
            return label
    return "Could Have"


def _to_number(value: Any) -> float | None:
    """Finite float for numeric input; None for anything else (NaN and inf included)."""
    if isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            number = float(value)
        elif isinstance(value, str):
            number = float(value.strip())
        else:
            return None
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def _to_number_or_zero(value: Any) -> float:
    number = _to_number(value)
    return 0.0 if number is None else number


def _clamp_score(value: Any) -> int:
    number = _to_number(value)
    if number is None:
        return SCORE_DEFAULT
    return int(round(min(max(number, SCORE_MIN), SCORE_MAX)))


def _coerce_count(value: Any) -> int:
    number = _to_number(value)
    if number is None:
        return 0
    return max(int(round(number)), 0)


Text = Annotated[str, BeforeValidator(_coerce_text)]
Level = Annotated[Literal["high", "medium", "low"], BeforeValidator(_normalize_level)]
Recommendation = Annotated[
    Literal["Must Have", "Should Have", "Could Have", "Won't Have"],
    BeforeValidator(_normalize_recommendation),
]
Score = Annotated[int, BeforeValidator(_clamp_score)]
Count = Annotated[int, BeforeValidator(_coerce_count)]


class PayloadModel(BaseModel):
    """Base for all payload shapes: camelCase aliases, nulls dropped, extras ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    # Fields that live on the Artifact row rather than inside the stored payload
    artifact_level_fields: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


# ==================== EMBEDDED SHAPES ====================


class UserStory(PayloadModel):
    id: Text = ""
    title: Text = ""
    description: Text = ""
    acceptance_criteria: list[Text] = Field(default_factory=list)
    priority: Level = "medium"
    edge_cases: list[Text] = Field(default_factory=list)


class PrioritizedFeature(PayloadModel):
    name: Text = ""
    reach: Score = SCORE_DEFAULT
    impact: Score = SCORE_DEFAULT
    confidence: Score = SCORE_DEFAULT
    effort: Score = SCORE_DEFAULT
    rice_score: Annotated[float, BeforeValidator(_to_number_or_zero)] = 0.0  # recomputed below
    recommendation: Recommendation = "Could Have"
    reasoning: Text = ""
    tradeoffs: Text = ""

    @model_validator(mode="after")
    def _recompute_rice(self) -> "PrioritizedFeature":
        self.rice_score = round(self.reach * self.impact * self.confidence / self.effort, 1)
        return self


class SprintStory(PayloadModel):
    title: Text = ""
    story_points: Count = 0
    priority: Level = "medium"
    assignment_suggestion: Text = ""


class SprintRisk(PayloadModel):
    risk: Text = ""
    severity: Level = "medium"
    mitigation: Text = ""


# ==================== PAYLOADS ====================


class PrdPayload(PayloadModel):
    artifact_level_fields: ClassVar[frozenset[str]] = frozenset({"title"})

    title: Text = "Untitled PRD"
    problem_statement: Text = ""
    target_audience: Text = ""
    goals: list[Text] = Field(default_factory=list)
    features: list[Text] = Field(default_factory=list)
    success_metrics: list[Text] = Field(default_factory=list)
    user_stories: list[UserStory] = Field(default_factory=list)
    out_of_scope: list[Text] = Field(default_factory=list)
    assumptions: list[Text] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def _default_blank_title(cls, value: str) -> str:
        return (value.strip() or "Untitled PRD")[:TITLE_MAX_LENGTH]


class UserStoriesPayload(PayloadModel):
    user_stories: list[UserStory] = Field(default_factory=list)


class ProblemRefinerPayload(PayloadModel):
    original_problem: Text = ""
    refined_statement: Text = ""
    context: Text = ""
    impact: Text = ""
    affected_users: Text = ""
    current_solutions: Text = ""
    proposed_approach: Text = ""
    success_criteria: list[Text] = Field(default_factory=list)


class FeaturePrioritizerPayload(PayloadModel):
    features: list[PrioritizedFeature] = Field(default_factory=list)
    summary: Text = ""

    @model_validator(mode="after")
    def _sort_by_rice(self) -> "FeaturePrioritizerPayload":
        self.features = sorted(self.features, key=lambda f: f.rice_score, reverse=True)
        return self


class SprintPlannerPayload(PayloadModel):
    sprint_goal: Text = ""
    duration: Text = ""
    capacity: Text = ""
    total_points: Count = 0
    stories: list[SprintStory] = Field(default_factory=list)
    risks: list[SprintRisk] = Field(default_factory=list)
    recommendations: list[Text] = Field(default_factory=list)


class InterviewPrepPayload(PayloadModel):
    question: Text = ""
    framework: Text = ""
    structured_answer: Text = ""
    key_points: list[Text] = Field(default_factory=list)
    example_scenario: Text = ""
    follow_up_questions: list[Text] = Field(default_factory=list)
    tips: list[Text] = Field(default_factory=list)
    feedback: Text = ""


PAYLOAD_MODELS: dict[ArtifactKind, type[PayloadModel]] = {
    ArtifactKind.PRD: PrdPayload,
    ArtifactKind.USER_STORIES: UserStoriesPayload,
    ArtifactKind.PROBLEM_REFINER: ProblemRefinerPayload,
    ArtifactKind.FEATURE_PRIORITIZER: FeaturePrioritizerPayload,
    ArtifactKind.SPRINT_PLANNER: SprintPlannerPayload,
    ArtifactKind.INTERVIEW_PREP: InterviewPrepPayload,
}


# ==================== VALIDATION API ====================

_EXPECTED_BY_ERROR_TYPE = {
    "model_type": "object",
    "dict_type": "object",
    "list_type": "array",
    "string_type": "string",
    "int_type": "integer",
    "int_parsing": "integer",
    "float_type": "number",
    "float_parsing": "number",
    "literal_error": "enum member",
}


def _schema_error(exc: ValidationError) -> SchemaValidationError:
    first = exc.errors()[0]
    path = ".".join(str(part) for part in first["loc"]) or "$"
    expected = _EXPECTED_BY_ERROR_TYPE.get(first["type"], first["msg"])
    return SchemaValidationError(field_path=path, expected=expected)


def validate_payload(kind: ArtifactKind, data: Any) -> PayloadModel:
    """Coerce a parsed JSON value into the payload model for ``kind``.

    Raises:
        SchemaValidationError: top-level value is not an object, or a field
            holds a value of an incompatible type.
    """
    model = PAYLOAD_MODELS[kind]
    if not isinstance(data, dict):
        raise SchemaValidationError(field_path="$", expected="object")
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise _schema_error(exc) from exc


def dump_payload(payload: PayloadModel) -> dict[str, Any]:
    """Serialize a payload model to the stored camelCase JSON object."""
    exclude = set(payload.artifact_level_fields) or None
    return payload.model_dump(by_alias=True, exclude=exclude)


def _is_text(annotation: Any) -> bool:
    if annotation is str:
        return True
    return get_origin(annotation) is Annotated and get_args(annotation)[0] is str


def rewritable_sections(kind: ArtifactKind) -> dict[str, str]:
    """Map each plain-text payload section (camelCase) to "text" or "list"."""
    model = PAYLOAD_MODELS[kind]
    sections: dict[str, str] = {}
    for name, field in model.model_fields.items():
        if name in model.artifact_level_fields:
            continue
        alias = field.alias or name
        annotation = field.annotation
        if _is_text(annotation):
            sections[alias] = "text"
        elif get_origin(annotation) is list and _is_text(get_args(annotation)[0]):
            sections[alias] = "list"
    return sections
