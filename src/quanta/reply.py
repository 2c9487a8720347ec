"""Reply generator clients used by the engine.

Every client turns a prompt into a reply string or raises
``ReplyGenerationError`` with a message that can be shown to the user.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from .errors import ReplyGenerationError
from .llm import LLM

logger = logging.getLogger(__name__)

CHAT_PATH = "/api/chat"
DEFAULT_TIMEOUT = 30.0
DEFAULT_ERROR = "Failed to get AI response"


class Reply(ABC):
    """Interface for anything that can answer a prompt."""

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """Returns the reply text for ``prompt``.

        Raises
        ------
        ReplyGenerationError
            On any failure, including timeouts.
        """
        pass


def _error_text(response: httpx.Response) -> str:
    """Best human-readable explanation for a failed relay response."""
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and isinstance(data.get("error"), str):
        return data["error"]
    return response.text.strip() or DEFAULT_ERROR


class HTTP(Reply):
    """Talks to the Quanta relay over HTTP.

    Parameters
    ----------
    api_base : str
        Base URL of the relay, e.g. ``http://localhost:3000``.
    timeout : float
        Seconds before the request counts as failed.
    transport : httpx.AsyncBaseTransport, optional
        Custom transport, mainly for tests.
    """

    def __init__(
        self,
        api_base: str = "http://localhost:3000",
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def generate(self, prompt: str) -> str:
        try:
            async with httpx.AsyncClient(
                base_url=self.api_base, timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(CHAT_PATH, json={"message": prompt})
        except httpx.TimeoutException as e:
            logger.error("Relay request timed out: %s", e)
            raise ReplyGenerationError("Request timed out") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error("Relay request failed: %s", e)
            raise ReplyGenerationError(str(e) or "Network error") from e

        content_type = response.headers.get("content-type", "")
        if response.is_error or "application/json" not in content_type:
            message = _error_text(response)
            logger.error("Relay returned %s: %s", response.status_code, message)
            raise ReplyGenerationError(message)

        try:
            data = response.json()
        except ValueError as e:
            raise ReplyGenerationError("Malformed response from server") from e
        reply = data.get("response") if isinstance(data, dict) else None
        if not isinstance(reply, str):
            raise ReplyGenerationError("Malformed response from server")
        return reply


class Direct(Reply):
    """Calls an LLM provider in-process, without the HTTP hop.

    The blocking SDK call runs in a worker thread so the event loop stays
    free while waiting.
    """

    def __init__(self, llm: LLM, timeout: float = DEFAULT_TIMEOUT):
        self.llm = llm
        self.timeout = timeout

    def _complete(self, prompt: str) -> str:
        response = self.llm.generate_response(self.llm.build_messages(prompt))
        return self.llm.extract_content(response)

    async def generate(self, prompt: str) -> str:
        try:
            reply = await asyncio.wait_for(
                asyncio.to_thread(self._complete, prompt), self.timeout
            )
        except asyncio.TimeoutError as e:
            logger.error("LLM call timed out after %ss", self.timeout)
            raise ReplyGenerationError("Request timed out") from e
        except Exception as e:
            logger.error("LLM call failed: %s", e)
            raise ReplyGenerationError(str(e) or DEFAULT_ERROR) from e
        if not isinstance(reply, str):
            raise ReplyGenerationError("Malformed response from model")
        return reply
