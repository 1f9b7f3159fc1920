"""AI analysis cache API endpoints."""

from typing import Any

from fastapi import APIRouter, Query

from studio_api.api.deps import EntityId, StorageDep
from studio_api.errors import NotFoundError
from studio_api.schemas import AiAnalysis, AnalysisType
from studio_api.schemas.entities import StudioModel

router = APIRouter()


class AnalysisBody(StudioModel):
    """Analysis payload; ``result`` is checked against ``analysis_type`` by storage."""

    analysis_type: AnalysisType
    result: dict[str, Any] | str
    severity: str | None = None
    suggestions: str | None = None
    metadata: str | None = None


@router.post("/{file_id}/analyses", response_model=AiAnalysis)
async def create_analysis(file_id: EntityId, request: AnalysisBody, storage: StorageDep) -> AiAnalysis:
    return await storage.create_ai_analysis({"file_id": file_id, **request.model_dump()})


@router.get("/{file_id}/analyses", response_model=list[AiAnalysis])
async def list_analyses(file_id: EntityId, storage: StorageDep) -> list[AiAnalysis]:
    """List a file's analyses, newest first."""
    return await storage.list_analyses_by_file(file_id)


@router.get("/{file_id}/analyses/latest", response_model=AiAnalysis)
async def get_latest_analysis(
    file_id: EntityId,
    storage: StorageDep,
    analysis_type: AnalysisType = Query(..., alias="type", description="Analysis type"),
) -> AiAnalysis:
    analysis = await storage.get_latest_analysis(file_id, analysis_type)
    if analysis is None:
        raise NotFoundError(f"No {analysis_type.value} analysis for this file")
    return analysis
