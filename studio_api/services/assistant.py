"""Code generation and chat collaborators backed by Google Gemini."""

import json
import re
from abc import ABC, abstractmethod
from typing import Any

import structlog
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage
from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError
from tenacity import retry, stop_after_attempt, wait_exponential

from studio_api.config import Settings
from studio_api.errors import UpstreamServiceError
from studio_api.schemas import File, FileType, Message, MessageRole

logger = structlog.get_logger()

_CODE_BLOCK = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL)


class GeneratedFile(BaseModel):
    """A file proposed by the code generator."""

    name: str = Field(min_length=1)
    path: str
    content: str
    type: FileType = FileType.FILE


class CodeGenerationResult(BaseModel):
    files: list[GeneratedFile]
    explanation: str = ""


class ChatReply(BaseModel):
    response: str
    metadata: dict[str, Any] | None = None


class CodeGenerator(ABC):
    """Turns a prompt, plus optional existing files, into project files."""

    @abstractmethod
    async def generate_code(
        self, prompt: str, context: list[File] | None = None
    ) -> CodeGenerationResult:
        """Generate files for a prompt.

        Args:
            prompt: What the user asked for
            context: Existing project files to build on

        Returns:
            Generated files and an explanation for the chat history

        Raises:
            UpstreamServiceError: If the AI service fails or answers unusably
        """


class ChatResponder(ABC):
    """Answers a chat message given the conversation so far."""

    @abstractmethod
    async def chat(self, message: str, history: list[Message]) -> ChatReply:
        pass


class UnavailableAssistant(CodeGenerator, ChatResponder):
    """Stand-in used when no API key is configured."""

    async def generate_code(
        self, prompt: str, context: list[File] | None = None
    ) -> CodeGenerationResult:
        raise UpstreamServiceError("AI service is not configured: GOOGLE_API_KEY is missing")

    async def chat(self, message: str, history: list[Message]) -> ChatReply:
        raise UpstreamServiceError("AI service is not configured: GOOGLE_API_KEY is missing")


GENERATION_SYSTEM_PROMPT = """You are an expert web developer working inside a code editor.
Generate complete, working files for the user's request. Prefer small, focused
files and keep existing file paths when you modify them.

Respond with JSON only, using this structure:
{{
  "files": [
    {{"name": "App.tsx", "path": "src/App.tsx", "content": "...", "type": "file"}}
  ],
  "explanation": "Short summary of what was generated"
}}"""

CHAT_SYSTEM_PROMPT = """You are a helpful programming assistant inside a code editor.
Answer concisely, include code snippets where they help, and refer to files by path."""


class GeminiAssistant(CodeGenerator, ChatResponder):
    """Gemini-backed code generator and chat responder."""

    def __init__(self, settings: Settings, llm: BaseChatModel | None = None):
        """Initialize the assistant.

        Args:
            settings: Application settings
            llm: Chat model to use (defaults to Gemini from settings)
        """
        if llm is None:
            if not settings.google_api_key:
                raise ValueError("Google API key not configured")
            from langchain_google_genai import ChatGoogleGenerativeAI

            llm = ChatGoogleGenerativeAI(
                model=settings.gemini_model,
                google_api_key=settings.google_api_key.get_secret_value(),
                temperature=settings.assistant_temperature,
                max_output_tokens=settings.assistant_max_tokens,
            )
        self.llm = llm

    @retry(stop=stop_after_attempt(3), wait=wait_exponential(min=1, max=10), reraise=True)
    async def _invoke(self, prompt: ChatPromptTemplate, variables: dict[str, Any]) -> str:
        chain = prompt | self.llm
        response = await chain.ainvoke(variables)
        content = response.content if hasattr(response, "content") else str(response)
        if isinstance(content, list):
            content = "".join(
                part.get("text", "") if isinstance(part, dict) else str(part)
                for part in content
            )
        return content

    async def _complete(self, prompt: ChatPromptTemplate, variables: dict[str, Any]) -> str:
        try:
            return await self._invoke(prompt, variables)
        except Exception as e:
            logger.error("AI service call failed", error=str(e), exc_info=True)
            raise UpstreamServiceError(f"AI service call failed: {e}") from e

    async def generate_code(
        self, prompt: str, context: list[File] | None = None
    ) -> CodeGenerationResult:
        template = ChatPromptTemplate.from_messages([
            ("system", GENERATION_SYSTEM_PROMPT),
            ("human", "{prompt}\n\nExisting files:\n{context}"),
        ])
        context_text = "\n\n".join(
            f"--- {f.path} ---\n{f.content}" for f in (context or [])
        ) or "(none)"

        logger.info("Generating code", prompt_length=len(prompt), context_files=len(context or []))
        text = await self._complete(template, {"prompt": prompt, "context": context_text})

        try:
            result = CodeGenerationResult.model_validate(extract_json(text))
        except (ValueError, PydanticValidationError) as e:
            logger.warning("Unusable code generation response", error=str(e))
            raise UpstreamServiceError(
                "AI service returned an invalid response: missing or invalid 'files' array"
            ) from e

        logger.info("Code generated", files=len(result.files))
        return result

    async def chat(self, message: str, history: list[Message]) -> ChatReply:
        template = ChatPromptTemplate.from_messages([
            ("system", CHAT_SYSTEM_PROMPT),
            MessagesPlaceholder("history"),
            ("human", "{message}"),
        ])
        text = await self._complete(
            template, {"history": to_chat_messages(history), "message": message}
        )
        if not text.strip():
            raise UpstreamServiceError("AI service returned an empty response")
        return ChatReply(response=text)


def to_chat_messages(history: list[Message]) -> list[BaseMessage]:
    return [
        HumanMessage(content=m.content) if m.role == MessageRole.USER else AIMessage(content=m.content)
        for m in history
    ]


def extract_json(text: str) -> Any:
    """Pull the JSON document out of a model response.

    Tries the raw text, then a fenced code block, then the outermost braces.

    Raises:
        ValueError: If no JSON document can be decoded
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    match = _CODE_BLOCK.search(text)
    if match:
        try:
            return json.loads(match.group(1))
        except json.JSONDecodeError:
            pass

    start, end = text.find("{"), text.rfind("}") + 1
    if start == -1 or end == 0:
        raise ValueError("Response did not contain JSON")
    return json.loads(text[start:end])


def build_assistant(settings: Settings) -> GeminiAssistant | UnavailableAssistant:
    if settings.google_api_key:
        return GeminiAssistant(settings)
    logger.warning("GOOGLE_API_KEY not set; AI endpoints will return 503")
    return UnavailableAssistant()
