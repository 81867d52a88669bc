"""Versioned schema registry and task-typed validation.

Each task type maps to exactly one schema (a pydantic model). Task types
without a dedicated schema fall back to the default itinerary schema.
"""

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ValidationError

from itinerary_ai.models.itinerary import GeneratedItinerary
from itinerary_ai.models.task_types import DEFAULT_TASK_TYPE, AiTaskType, normalize_task_type

MAX_SUMMARY_ERRORS = 6


@dataclass(frozen=True)
class TaskSchema:
    """Registered schema for a task type."""

    task_type: AiTaskType
    version: str
    model: type[BaseModel]


@dataclass(frozen=True)
class SchemaIssue:
    """One validation failure at a JSON-pointer style path."""

    path: str
    message: str


@dataclass(frozen=True)
class SchemaValidationResult:
    """Outcome of validating a payload against a task schema."""

    valid: bool
    resolved_task_type: AiTaskType
    errors: list[SchemaIssue] = field(default_factory=list)
    value: BaseModel | None = None


_REGISTRY: dict[AiTaskType, TaskSchema] = {
    AiTaskType.GENERATE_ITINERARY: TaskSchema(
        task_type=AiTaskType.GENERATE_ITINERARY,
        version="v1",
        model=GeneratedItinerary,
    ),
}


def get_schema_for_task_type(task_type: str | AiTaskType | None) -> TaskSchema:
    """Resolve the schema for a raw task type, falling back to the default."""
    resolved = normalize_task_type(task_type)
    return _REGISTRY.get(resolved) or _REGISTRY[DEFAULT_TASK_TYPE]


def _pointer(loc: tuple[int | str, ...]) -> str:
    if not loc:
        return "/"
    return "/" + "/".join(str(part) for part in loc)


def validate_for_task_type(value: Any, task_type: str | AiTaskType | None) -> SchemaValidationResult:
    """Validate a normalized payload against its task schema.

    Extra properties are accepted and explicit null is valid for nullable fields.
    """
    schema = get_schema_for_task_type(task_type)
    try:
        model = schema.model.model_validate(value)
    except ValidationError as exc:
        issues = [
            SchemaIssue(path=_pointer(error["loc"]), message=error["msg"])
            for error in exc.errors(include_url=False)
        ]
        return SchemaValidationResult(
            valid=False, resolved_task_type=schema.task_type, errors=issues
        )
    return SchemaValidationResult(valid=True, resolved_task_type=schema.task_type, value=model)


def summarize_schema_errors(errors: list[SchemaIssue]) -> str:
    """Summarize up to six issues for logs and the repair prompt."""
    if not errors:
        return "unknown"
    return "; ".join(
        f"{issue.path} {issue.message}".strip() for issue in errors[:MAX_SUMMARY_ERRORS]
    )
