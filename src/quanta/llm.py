"""Concrete implementations for LLM providers."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from .models import SYSTEM_ROLE, USER_ROLE

SYSTEM_PROMPT = """You are QuantaAI, an advanced AI assistant designed to act like a professional, reliable, and conversational chatbot.

1. Identity & Personality
   - You are QuantaAI: futuristic, intelligent, and approachable.
   - Maintain a professional yet friendly tone.
   - Be concise, clear, and helpful in every response.
   - Use structured formatting (lists, steps) to improve readability.

2. Core Capabilities
   - Answer questions in domains such as Computer Science, AI/ML, Data Science, and Web Development.
   - Provide working code snippets when asked for technical help.
   - Support brainstorming, creative writing, summaries, and career guidance.
   - Explain concepts at the level the user needs, from beginner to expert.

3. Response Style
   - Use short paragraphs with clear formatting.
   - For technical queries, show step-by-step solutions and clean code snippets.
   - For general queries, keep answers conversational but accurate.

4. Mission
   - Assist with learning, building, analyzing, and creating.
   - Always prioritize clarity, usefulness, and user needs."""

GROQ_BASE_URL = "https://api.groq.com/openai/v1"


class LLM(ABC):
    """Abstract Base Class for all LLM providers.

    Providers own the fixed persona: callers pass a bare prompt to
    ``build_messages`` and send the result to ``generate_response``.
    """

    system_prompt: str = SYSTEM_PROMPT

    @abstractmethod
    def generate_response(
        self, messages: List[Dict[str, Any]], model: Optional[str] = None, **kwargs: Any
    ) -> Any:
        """Generates a response from the LLM provider.

        This method should return the provider's native, rich response object
        directly from their SDK.

        Parameters
        ----------
        messages : List[Dict[str, Any]]
            A list of message dictionaries, conforming to the provider's
            expected format.
        model : str, optional
            The specific model to use for the generation.
        **kwargs : Any
            Provider-specific parameters (e.g., temperature) to be
            passed directly to the SDK.

        Returns
        -------
        Any
            The provider's native, rich response object.
        """
        pass

    @abstractmethod
    def extract_content(self, response: Any) -> str:
        """Extracts the text content from the provider's native response object.

        Parameters
        ----------
        response : Any
            The provider's native response object from generate_response.

        Returns
        -------
        str
            The extracted text content from the response.
        """
        pass

    def build_messages(self, prompt: str) -> List[Dict[str, str]]:
        """Wraps a single user prompt with the system persona."""
        return [
            {"role": SYSTEM_ROLE, "content": self.system_prompt},
            {"role": USER_ROLE, "content": prompt},
        ]


class OpenAI(LLM):
    def __init__(self, default_model: str = "gpt-4o-mini", **client_kwargs: Any):
        from openai import OpenAI

        self.client = OpenAI(**client_kwargs)
        self.model = default_model

    def generate_response(
        self, messages: List[Dict[str, Any]], model=None, **kwargs: Any
    ) -> Any:
        return self.client.chat.completions.create(
            messages=messages, model=model or self.model, **kwargs
        )

    def extract_content(self, response: Any) -> str:
        return response.choices[0].message.content or ""


class Groq(OpenAI):
    """Groq's OpenAI-compatible chat completions endpoint."""

    def __init__(
        self,
        api_key: str,
        default_model: str = "llama3-8b-8192",
        base_url: str = GROQ_BASE_URL,
    ):
        super().__init__(default_model, api_key=api_key, base_url=base_url)

    def generate_response(self, messages, model=None, **kwargs):
        kwargs.setdefault("temperature", 0.7)
        kwargs.setdefault("max_tokens", 2048)
        kwargs.setdefault("top_p", 1)
        kwargs.setdefault("stream", False)
        return super().generate_response(messages, model, **kwargs)


class Echo(LLM):
    """Answers with the user's own prompt. Useful offline and in tests."""

    def __init__(self, default_model: str = "echo-v1", delay: float = 0.0):
        self.model = default_model
        self.delay = delay

    def generate_response(self, messages, model=None, **kwargs):
        if self.delay:
            import time

            time.sleep(self.delay)
        user_prompt = messages[-1]["content"] if messages else "No message provided"
        content = f"**Echo LLM - static response for testing**\n\n*Your prompt:*\n\n{user_prompt}"

        return {
            "content": content,
            "raw_response": "Echo LLM - static response for testing",
        }

    def extract_content(self, response: Any) -> str:
        if isinstance(response, dict) and "content" in response:
            return response["content"]
        return str(response)
