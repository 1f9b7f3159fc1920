"""Request dependencies resolved from application state."""

from typing import Annotated

from fastapi import Depends, Path, Request

from studio_api.schemas import MAX_ENTITY_ID
from studio_api.services import ChatResponder, CodeGenerator
from studio_api.storage import Storage


def get_storage(request: Request) -> Storage:
    """Storage backend constructed at startup."""
    return request.app.state.storage


def get_code_generator(request: Request) -> CodeGenerator:
    return request.app.state.assistant


def get_chat_responder(request: Request) -> ChatResponder:
    return request.app.state.assistant


StorageDep = Annotated[Storage, Depends(get_storage)]
CodeGeneratorDep = Annotated[CodeGenerator, Depends(get_code_generator)]
ChatResponderDep = Annotated[ChatResponder, Depends(get_chat_responder)]

# Path ids outside the INTEGER column range are rejected with 400.
EntityId = Annotated[int, Path(ge=1, le=MAX_ENTITY_ID)]
