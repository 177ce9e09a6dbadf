"""
Answer generation over assembled context, backed by a local Ollama model.
"""

import time
from abc import ABC, abstractmethod
from typing import List, Optional

import httpx
import ollama

from ..core.errors import GenerationUnavailable
from ..util.logging import logger

# Errors an upstream generation call may surface, including malformed responses
UPSTREAM_ERRORS = (ollama.ResponseError, httpx.HTTPError, ConnectionError, OSError, ValueError, KeyError, TypeError)


class IGenerationProvider(ABC):
    """Abstract interface for text generation providers."""

    model_name: str

    @abstractmethod
    def generate_text(self, prompt: str, images: Optional[List[str]] = None) -> str:
        """Generate a completion for prompt; images are base64 strings or file paths."""
        pass


class OllamaGenerationProvider(IGenerationProvider):
    """
    Generation through the Ollama chat API.

    The prompt is sent as a single user message; the timeout applies to the
    whole HTTP request.
    """

    def __init__(self, model_name: str = "llama3.2", host: str = None, timeout: float = 120, temperature: float = 0.2):
        self.model_name = model_name
        self.temperature = temperature
        self.client = ollama.Client(host=host, timeout=timeout)

    def generate_text(self, prompt: str, images: Optional[List[str]] = None) -> str:
        message = {'role': 'user', 'content': prompt}
        if images:
            message['images'] = images

        response = self.client.chat(
            model=self.model_name,
            messages=[message],
            options={'temperature': self.temperature}
        )
        return response['message']['content'] or ''

    def is_available(self) -> bool:
        """Check if Ollama is reachable."""
        try:
            self.client.list()
            return True
        except UPSTREAM_ERRORS:
            return False


def build_prompt(question: str, context: str) -> str:
    return f"""You are an intelligent assistant that answers questions based on the user's saved content.

USER'S SAVED CONTENT:
{context}

USER'S QUESTION:
{question}

INSTRUCTIONS:
1. Answer the question ONLY using information from the saved content provided above
2. If the content contains the answer, provide a clear and concise response
3. Cite which sources you used (e.g., "According to Source 1..." or "Based on the article about...")
4. If the saved content doesn't contain enough information to answer the question, clearly state that
5. Be conversational and natural in your response
6. If you're inferring or making assumptions, mention that clearly

ANSWER:"""


def complete(provider: IGenerationProvider, prompt: str, images: Optional[List[str]] = None, operation: str = "answer") -> str:
    """
    Run one generation call and return the stripped text.

    Raises:
        GenerationUnavailable: The provider failed or returned nothing.
    """
    model = getattr(provider, "model_name", "unknown")
    start_time = time.time()
    try:
        text = provider.generate_text(prompt, images=images)
    except UPSTREAM_ERRORS as e:
        logger.log_generation(model, len(prompt), start_time, time.time(), status="failed",
                              details={"operation": operation, "error": str(e)})
        raise GenerationUnavailable(f"Generation provider '{model}' failed: {e}") from e

    text = (text or "").strip()
    if not text:
        logger.log_generation(model, len(prompt), start_time, time.time(), status="failed",
                              details={"operation": operation, "error": "empty response"})
        raise GenerationUnavailable(f"Generation provider '{model}' returned an empty response")

    logger.log_generation(model, len(prompt), start_time, time.time(),
                          details={"operation": operation, "response_length": len(text)})
    return text


class AnswerGenerator:
    """Answers a question from an assembled context with one generation call."""

    def __init__(self, provider: IGenerationProvider):
        self.provider = provider

    def generate(self, question: str, context: str) -> str:
        return complete(self.provider, build_prompt(question, context))
