"""Typed shapes of AI analysis results.

The assistant returns one JSON document per analysis run; its shape depends
on the analysis type. Results are validated here before they reach storage,
where they are kept as serialized JSON.
"""

import json
from enum import Enum
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from studio_api.errors import ValidationError


class AnalysisType(str, Enum):
    """Analysis type enum."""

    REVIEW = "review"
    EXPLAIN = "explain"
    REFACTOR = "refactor"
    BUGS = "bugs"
    DOCUMENT = "document"
    PERFORMANCE = "performance"
    SECURITY = "security"
    ACCESSIBILITY = "accessibility"


class ResultModel(BaseModel):
    """Base for result shapes; camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReviewIssue(ResultModel):
    severity: Literal["critical", "warning", "info"]
    category: str
    message: str
    suggestion: str | None = None
    line: int | None = None


class CodeReviewResult(ResultModel):
    """Overall code review with a 0-10 rating."""

    overall_rating: float = Field(ge=0, le=10)
    summary: str
    issues: list[ReviewIssue] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)


class ExplainedComponent(ResultModel):
    type: str
    name: str
    description: str


class CodeExplanationResult(ResultModel):
    """Plain-language explanation of a file."""

    summary: str
    purpose: str
    components: list[ExplainedComponent] = Field(default_factory=list)
    key_features: list[str] = Field(default_factory=list)
    usage: str | None = None


class RefactoringSuggestion(ResultModel):
    title: str
    description: str
    before: str
    after: str
    benefit: str
    effort: Literal["low", "medium", "high"]


class RefactoringResult(ResultModel):
    """Prioritised refactoring suggestions."""

    priority: Literal["low", "medium", "high"]
    suggestions: list[RefactoringSuggestion]


class DetectedBug(ResultModel):
    severity: Literal["critical", "major", "minor"]
    type: str
    description: str
    fix: str
    impact: str
    line: int | None = None


class BugDetectionResult(ResultModel):
    """Bugs found in a file."""

    bugs_found: int = Field(ge=0)
    bugs: list[DetectedBug] = Field(default_factory=list)
    potential_issues: list[str] = Field(default_factory=list)


class DocumentationResult(ResultModel):
    """The file content with documentation added."""

    documented_code: str


class PerformanceIssue(ResultModel):
    category: str
    severity: Literal["low", "medium", "high"]
    description: str
    recommendation: str
    estimated_impact: str


class PerformanceResult(ResultModel):
    """Performance score (0-100) with issues."""

    score: float = Field(ge=0, le=100)
    issues: list[PerformanceIssue] = Field(default_factory=list)
    optimizations: list[str] = Field(default_factory=list)


class Vulnerability(ResultModel):
    type: str
    severity: Literal["low", "medium", "high", "critical"]
    description: str
    location: str
    fix: str
    cve: str | None = None


class SecurityResult(ResultModel):
    """Security scan."""

    risk_level: Literal["low", "medium", "high", "critical"]
    vulnerabilities: list[Vulnerability] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class AccessibilityIssue(ResultModel):
    rule: str
    impact: Literal["minor", "moderate", "serious", "critical"]
    description: str
    element: str | None = None
    fix: str


class AccessibilityResult(ResultModel):
    """Accessibility check (0-100) against WCAG."""

    score: float = Field(ge=0, le=100)
    wcag_level: str | None = None
    issues: list[AccessibilityIssue] = Field(default_factory=list)
    passed: list[str] = Field(default_factory=list)


AnalysisResult = Union[
    CodeReviewResult,
    CodeExplanationResult,
    RefactoringResult,
    BugDetectionResult,
    DocumentationResult,
    PerformanceResult,
    SecurityResult,
    AccessibilityResult,
]

RESULT_MODELS: dict[AnalysisType, type[ResultModel]] = {
    AnalysisType.REVIEW: CodeReviewResult,
    AnalysisType.EXPLAIN: CodeExplanationResult,
    AnalysisType.REFACTOR: RefactoringResult,
    AnalysisType.BUGS: BugDetectionResult,
    AnalysisType.DOCUMENT: DocumentationResult,
    AnalysisType.PERFORMANCE: PerformanceResult,
    AnalysisType.SECURITY: SecurityResult,
    AnalysisType.ACCESSIBILITY: AccessibilityResult,
}


def parse_analysis_result(analysis_type: AnalysisType, data: Any) -> AnalysisResult:
    """Validate raw result data against the model for ``analysis_type``.

    ``data`` may be a mapping or a JSON string. Raises pydantic's
    ValidationError or ValueError on mismatch; use
    :func:`validate_analysis_result` outside of pydantic validators.
    """
    model = RESULT_MODELS[AnalysisType(analysis_type)]
    if isinstance(data, str):
        return model.model_validate_json(data)
    return model.model_validate(data)


def validate_analysis_result(analysis_type: str, data: Any) -> AnalysisResult:
    """Validate an analysis result, raising ValidationError on any mismatch."""
    try:
        kind = AnalysisType(analysis_type)
    except ValueError as e:
        raise ValidationError(f"Unknown analysis type: {analysis_type}") from e

    try:
        return parse_analysis_result(kind, data)
    except PydanticValidationError as e:
        raise ValidationError(
            f"Invalid {kind.value} analysis result",
            errors=json.loads(e.json()),
        ) from e


def dump_analysis_result(result: AnalysisResult) -> str:
    """Serialize a typed result the way it is persisted."""
    return result.model_dump_json(by_alias=True, exclude_none=True)
