"""Request schemas for generation endpoints.

Each artifact kind accepts its own body shape. Minimum lengths are enforced
here, at the API boundary, so rejected input never reaches the model.
"""

from abc import abstractmethod
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from prdforge.core.exceptions import InputValidationError
from prdforge.schemas.payloads import ArtifactKind


def require_min_length(value: str, minimum: int, label: str) -> str:
    if len(value) < minimum:
        raise ValueError(f"{label} must be at least {minimum} characters")
    return value


def require_max_length(value: str, maximum: int, label: str) -> str:
    if len(value) > maximum:
        raise ValueError(f"{label} must be at most {maximum} characters")
    return value


def first_error_message(exc: ValidationError) -> str:
    """Turn the first pydantic error into a message naming the violated constraint."""
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error["loc"] if part != "body")
    if error["type"] == "missing":
        return f"{field or 'Request body'} is required"
    message = error["msg"].removeprefix("Value error, ")
    if error["type"] == "value_error" or not field:
        return message
    return f"{field}: {message}"


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerationInput(ApiModel):
    """Base for per-kind generation bodies. Subclasses define prompt_text()."""

    model: str | None = None

    @abstractmethod
    def prompt_text(self) -> str:
        """Input text as embedded in the user prompt."""

    def raw_input(self) -> str:
        return self.prompt_text()


class PrdInput(GenerationInput):
    idea: str

    @field_validator("idea")
    @classmethod
    def _check_idea(cls, value: str) -> str:
        return require_min_length(value, 20, "Idea")

    def prompt_text(self) -> str:
        return self.idea


class UserStoriesInput(GenerationInput):
    feature_idea: str

    @field_validator("feature_idea")
    @classmethod
    def _check_feature_idea(cls, value: str) -> str:
        return require_min_length(value, 10, "Feature idea")

    def prompt_text(self) -> str:
        return self.feature_idea


class ProblemRefinerInput(GenerationInput):
    problem: str

    @field_validator("problem")
    @classmethod
    def _check_problem(cls, value: str) -> str:
        return require_min_length(value, 10, "Problem description")

    def prompt_text(self) -> str:
        return self.problem


class FeaturePrioritizerInput(GenerationInput):
    features: list[str]

    @field_validator("features")
    @classmethod
    def _check_features(cls, value: list[str]) -> list[str]:
        if any(len(name) < 1 for name in value):
            raise ValueError("Feature names must not be empty")
        if len(value) < 2:
            raise ValueError("Provide at least 2 features to prioritize")
        return value

    def prompt_text(self) -> str:
        return "\n".join(f"{index}. {name}" for index, name in enumerate(self.features, start=1))

    def raw_input(self) -> str:
        return "\n".join(self.features)


class SprintPlannerInput(GenerationInput):
    backlog: str

    @field_validator("backlog")
    @classmethod
    def _check_backlog(cls, value: str) -> str:
        return require_min_length(value, 20, "Backlog")

    def prompt_text(self) -> str:
        return self.backlog


class InterviewPrepInput(GenerationInput):
    question: str

    @field_validator("question")
    @classmethod
    def _check_question(cls, value: str) -> str:
        return require_min_length(value, 10, "Question")

    def prompt_text(self) -> str:
        return self.question


INPUT_MODELS: dict[ArtifactKind, type[GenerationInput]] = {
    ArtifactKind.PRD: PrdInput,
    ArtifactKind.USER_STORIES: UserStoriesInput,
    ArtifactKind.PROBLEM_REFINER: ProblemRefinerInput,
    ArtifactKind.FEATURE_PRIORITIZER: FeaturePrioritizerInput,
    ArtifactKind.SPRINT_PLANNER: SprintPlannerInput,
    ArtifactKind.INTERVIEW_PREP: InterviewPrepInput,
}


def parse_generation_input(kind: ArtifactKind, body: Any) -> GenerationInput:
    """Validate a request body for ``kind``.

    Raises:
        InputValidationError: body is not an object or violates a constraint.
    """
    if not isinstance(body, dict):
        raise InputValidationError("Request body must be a JSON object")
    try:
        return INPUT_MODELS[kind].model_validate(body)
    except ValidationError as exc:
        raise InputValidationError(first_error_message(exc)) from exc


class RewriteSectionRequest(ApiModel):
    section_name: str
    current_content: str
    instruction: str
    model: str | None = None

    @field_validator("section_name", "current_content")
    @classmethod
    def _check_not_empty(cls, value: str, info) -> str:
        if len(value) < 1:
            raise ValueError(f"{to_camel(info.field_name)} must not be empty")
        return value

    @field_validator("instruction")
    @classmethod
    def _check_instruction(cls, value: str) -> str:
        return require_min_length(value, 5, "Rewrite instruction")


class RewriteSectionResponse(ApiModel):
    rewritten_content: str
