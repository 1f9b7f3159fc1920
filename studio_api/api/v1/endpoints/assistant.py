"""Chat and code generation endpoints.

These are the only routes that combine several storage operations: they
read project state, call the assistant, then persist what it produced.
"""

import json

import structlog
from fastapi import APIRouter
from pydantic import Field

from studio_api.api.deps import ChatResponderDep, CodeGeneratorDep, StorageDep
from studio_api.errors import NotFoundError
from studio_api.schemas import EntityRef, FileCreate, Message, MessageCreate, MessageRole
from studio_api.schemas.entities import StudioModel
from studio_api.services import CodeGenerationResult

logger = structlog.get_logger()
router = APIRouter()


class ChatRequest(StudioModel):
    project_id: EntityRef
    message: str = Field(min_length=1)


class GenerateCodeRequest(StudioModel):
    project_id: EntityRef
    prompt: str = Field(min_length=1)
    context: list[int] | None = Field(
        default=None, description="Ids of existing files to include; defaults to all"
    )


@router.post("/chat", response_model=Message)
async def chat(
    request: ChatRequest,
    storage: StorageDep,
    responder: ChatResponderDep,
) -> Message:
    """Answer a chat message and append both sides to the project's history."""
    if await storage.get_project(request.project_id) is None:
        raise NotFoundError("Project not found")

    history = await storage.list_messages_by_project(request.project_id)
    reply = await responder.chat(request.message, history)

    await storage.create_message(
        MessageCreate(project_id=request.project_id, role=MessageRole.USER, content=request.message)
    )
    metadata = json.dumps(reply.metadata) if reply.metadata else None
    return await storage.create_message(
        MessageCreate(
            project_id=request.project_id,
            role=MessageRole.ASSISTANT,
            content=reply.response,
            metadata=metadata,
        )
    )


@router.post("/generate-code", response_model=CodeGenerationResult)
async def generate_code(
    request: GenerateCodeRequest,
    storage: StorageDep,
    generator: CodeGeneratorDep,
) -> CodeGenerationResult:
    """Generate files for a prompt and add them to the project."""
    if await storage.get_project(request.project_id) is None:
        raise NotFoundError("Project not found")

    existing = await storage.list_files_by_project(request.project_id)
    if request.context is not None:
        wanted = set(request.context)
        existing = [f for f in existing if f.id in wanted]

    result = await generator.generate_code(request.prompt, existing)

    for generated in result.files:
        await storage.create_file(
            FileCreate(
                project_id=request.project_id,
                name=generated.name,
                path=generated.path,
                content=generated.content,
                type=generated.type,
            )
        )
    await storage.create_message(
        MessageCreate(
            project_id=request.project_id,
            role=MessageRole.ASSISTANT,
            content=result.explanation,
        )
    )

    logger.info(
        "Generated files stored",
        project_id=request.project_id,
        files=len(result.files),
    )
    return result
