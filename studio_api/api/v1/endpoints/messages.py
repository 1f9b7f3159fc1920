"""Chat message API endpoints."""

from fastapi import APIRouter

from studio_api.api.deps import EntityId, StorageDep
from studio_api.schemas import Message, MessageCreate, MessageRole
from studio_api.schemas.entities import StudioModel

router = APIRouter()


class MessageBody(StudioModel):
    """Message payload; the project comes from the path."""

    role: MessageRole
    content: str
    metadata: str | None = None


@router.post("/{project_id}/messages", response_model=Message)
async def create_message(
    project_id: EntityId,
    request: MessageBody,
    storage: StorageDep,
) -> Message:
    return await storage.create_message(
        MessageCreate(project_id=project_id, **request.model_dump())
    )


@router.get("/{project_id}/messages", response_model=list[Message])
async def list_messages(project_id: EntityId, storage: StorageDep) -> list[Message]:
    """List chat messages, oldest first."""
    return await storage.list_messages_by_project(project_id)


@router.delete("/{project_id}/messages")
async def delete_messages(project_id: EntityId, storage: StorageDep) -> dict:
    """Clear a project's chat history. Succeeds even if there is nothing to delete."""
    return {"success": await storage.delete_messages_by_project(project_id)}
