"""The message lifecycle engine.

The engine owns the in-memory conversation. Every change goes through it:
a message is appended, persisted, then announced to subscribers, in that
order. A submission is a turn: ``post`` appends the prompt and ``respond``
appends the reply. Turns are serialized, so the reply to one prompt is always
appended before the next prompt.
"""

import asyncio
import enum
import logging
import threading
from typing import Any, Callable, Coroutine, List, Optional

from .errors import ReplyGenerationError
from .models import (
    ASSISTANT_ROLE,
    MESSAGE_EVENT,
    RESET_EVENT,
    TYPING_EVENT,
    USER_ROLE,
    ChatMessage,
    Conversation,
    EngineEvent,
)
from .reply import Reply
from .store import Store

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = "Welcome! Ask me anything, or try the quick actions above."
NEW_CHAT_MESSAGE = "New chat started. How can I help?"
ERROR_MESSAGE = (
    "Sorry, I encountered an error: {error}. "
    "Please try again or check your connection."
)

BASE_LATENCY_MS = 450
MIN_PACING_MS = 200
MAX_PACING_MS = 1200
PER_CHAR_MS = 8

Listener = Callable[[EngineEvent], None]


class State(str, enum.Enum):
    IDLE = "idle"
    COMPOSING = "composing"
    AWAITING_REPLY = "awaiting_reply"


def reply_delay(reply: str) -> float:
    """Seconds to hold a reply back so it reads as if being generated."""
    pacing = min(MAX_PACING_MS, max(MIN_PACING_MS, len(reply) * PER_CHAR_MS))
    return (BASE_LATENCY_MS + pacing) / 1000


class Engine:
    """Drives one conversation through submit/reply cycles.

    Parameters
    ----------
    store : Store
        Where the conversation is persisted after every change.
    reply : Reply
        The reply generator client.
    pacing : bool, default=True
        Hold replies back by ``reply_delay`` before showing them.

    Examples
    --------
    >>> engine = Engine(store.InMemory(), reply.Direct(llm.Echo()))
    >>> engine.start()
    >>> asyncio.run(engine.submit("Hello"))
    """

    def __init__(self, store: Store, reply: Reply, pacing: bool = True):
        self.store = store
        self.reply = reply
        self.pacing = pacing
        self.conversation = Conversation()
        self.state = State.IDLE
        self.typing = False
        self._turn = asyncio.Lock()
        self._epoch = 0
        self._pending: Optional[str] = None
        self._pending_epoch = 0
        self._responding = False
        self._listeners: List[Listener] = []

    @property
    def messages(self) -> List[ChatMessage]:
        """A snapshot of the conversation, in display order."""
        return list(self.conversation.messages)

    def subscribe(self, listener: Listener) -> Listener:
        """Registers ``listener`` to receive every ``EngineEvent``."""
        self._listeners.append(listener)
        return listener

    def _emit(self, event: EngineEvent) -> None:
        for listener in self._listeners:
            listener(event)

    def _set_typing(self, typing: bool) -> None:
        self.typing = typing
        self._emit(EngineEvent(kind=TYPING_EVENT, typing=typing))

    def _append(self, role: str, content: str) -> ChatMessage:
        message = ChatMessage(role=role, content=content)
        if self.conversation.messages:
            last = self.conversation.messages[-1].timestamp
            if message.timestamp < last:
                message = message.model_copy(update={"timestamp": last})
        self.conversation.messages.append(message)
        self.store.save(self.conversation.messages)
        self._emit(EngineEvent(kind=MESSAGE_EVENT, message=message))
        return message

    def start(self) -> Conversation:
        """Loads the persisted conversation, seeding a welcome if it is empty."""
        self.conversation = Conversation(messages=self.store.load())
        self._emit(EngineEvent(kind=RESET_EVENT))
        if not self.conversation.messages:
            self._append(ASSISTANT_ROLE, WELCOME_MESSAGE)
        logger.info("Conversation started with %d messages", len(self.conversation.messages))
        return self.conversation

    def reset(self) -> ChatMessage:
        """Starts a new chat, discarding the current one in memory and on disk.

        A reply still in flight for the old conversation is dropped when it
        arrives. A posted prompt whose reply was never requested is abandoned.
        """
        self._epoch += 1
        if self._pending is not None and not self._responding:
            self._finish_turn()
        self.store.clear()
        self.conversation = Conversation()
        self._emit(EngineEvent(kind=RESET_EVENT))
        logger.info("New conversation %s", self.conversation.id)
        return self._append(ASSISTANT_ROLE, NEW_CHAT_MESSAGE)

    @property
    def pending(self) -> Optional[str]:
        """The posted prompt still waiting for its reply, if any."""
        return self._pending

    async def post(self, raw_input: Optional[str]) -> Optional[ChatMessage]:
        """Appends the user's message and opens a turn awaiting ``respond``.

        Waits for any previous turn to finish first, so a prompt is never
        appended before the reply to the one before it. Returns the user
        message, or None when the input is blank.
        """
        text = (raw_input or "").strip()
        if not text:
            return None

        await self._turn.acquire()
        try:
            self.state = State.COMPOSING
            message = self._append(USER_ROLE, text)
        except BaseException:
            self.state = State.IDLE
            self._turn.release()
            raise
        self._pending = text
        self._pending_epoch = self._epoch
        self.state = State.AWAITING_REPLY
        self._set_typing(True)
        return message

    async def respond(self) -> Optional[ChatMessage]:
        """Generates and appends the reply to the posted prompt, closing the turn.

        Returns the assistant message, or None when nothing is pending or the
        conversation was reset while the reply was being generated.
        """
        if self._pending is None or self._responding:
            return None

        self._responding = True
        try:
            try:
                content = await self.reply.generate(self._pending)
                if self.pacing:
                    await asyncio.sleep(reply_delay(content))
            except ReplyGenerationError as e:
                content = ERROR_MESSAGE.format(error=e)

            if self._pending_epoch != self._epoch:
                logger.info("Dropping reply for a conversation that was reset")
                return None
            return self._append(ASSISTANT_ROLE, content)
        finally:
            self._finish_turn()

    def _finish_turn(self) -> None:
        self._pending = None
        self._responding = False
        self.state = State.IDLE
        self._set_typing(False)
        self._turn.release()

    async def submit(self, raw_input: Optional[str]) -> Optional[ChatMessage]:
        """Sends a user message and appends the assistant's answer.

        Returns the assistant message, or None when the input is blank or the
        conversation was reset while the reply was pending.
        """
        if await self.post(raw_input) is None:
            return None
        return await self.respond()


class LoopThread:
    """An event loop running forever on a daemon thread.

    Synchronous callers (Dash callbacks run on Flask worker threads) use it
    to drive the engine from one logical thread.
    """

    def __init__(self, name: str = "quanta-engine"):
        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self.loop.run_forever, name=name, daemon=True
        )
        self._thread.start()

    def run(self, coro: Coroutine, timeout: Optional[float] = None) -> Any:
        """Runs ``coro`` on the loop and blocks until it finishes."""
        return asyncio.run_coroutine_threadsafe(coro, self.loop).result(timeout)

    def call(self, func: Callable, *args: Any) -> Any:
        """Runs a plain function on the loop thread and returns its result."""

        async def _call():
            return func(*args)

        return self.run(_call())

    def stop(self) -> None:
        self.loop.call_soon_threadsafe(self.loop.stop)
        self._thread.join()
        self.loop.close()
