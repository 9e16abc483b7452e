from __future__ import annotations

from functools import lru_cache

from langchain_community.chat_models import ChatOllama
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from loguru import logger

from agent_app.config import get_settings
from exit_planner.issues import GenerationError

SYSTEM_PROMPT = (
    "You are a hiking safety assistant. Answer only with the JSON object the user asks for."
)


@lru_cache(maxsize=1)
def get_llm() -> BaseChatModel:
    """Return a cached ChatOllama instance configured from settings."""

    settings = get_settings()
    return ChatOllama(base_url=settings.ollama_base_url, model=settings.ollama_model)


class OllamaGenerator:
    """Adapts a chat model to the ``generate(prompt) -> text`` callable the planner expects."""

    def __init__(self, llm: BaseChatModel) -> None:
        self.llm = llm

    def __call__(self, prompt: str) -> str:
        messages = [SystemMessage(content=SYSTEM_PROMPT), HumanMessage(content=prompt)]
        try:
            response = self.llm.invoke(messages)
        except Exception as exc:  # noqa: BLE001
            logger.error("Ollama invocation failed", error=str(exc))
            raise GenerationError(
                "Ollama generation failed. Verify the Ollama daemon is running and the model "
                f"is pulled. Error: {exc}"
            ) from exc
        content = getattr(response, "content", str(response))
        logger.debug("Ollama response received", excerpt=str(content)[:200])
        return str(content)
