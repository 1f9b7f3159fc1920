"""Services package for Code Studio."""

from studio_api.services.assistant import (
    ChatReply,
    ChatResponder,
    CodeGenerationResult,
    CodeGenerator,
    GeminiAssistant,
    GeneratedFile,
    UnavailableAssistant,
    build_assistant,
    extract_json,
)

__all__ = [
    "ChatReply",
    "ChatResponder",
    "CodeGenerationResult",
    "CodeGenerator",
    "GeminiAssistant",
    "GeneratedFile",
    "UnavailableAssistant",
    "build_assistant",
    "extract_json",
]
