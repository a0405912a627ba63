"""Conversation transcript and the session loop that drives it."""

import asyncio
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from .config import SnapshellConfig
from .history import CommandHistory, PersistenceError
from .llm_handler import LLMHandler, LLMResponse, ResponseParseError, TransportError
from .parser import ParsedResponse, parse_response
from .prompts import build_system_prompt
from .ui import Presenter

logger = logging.getLogger(__name__)

EXIT_TOKEN = "/exit"


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    """Represents a single conversation message."""

    role: Role
    content: str

    def to_dict(self) -> Dict[str, str]:
        """Convert message to the chat API format."""
        return {"role": self.role.value, "content": self.content}


class Transcript:
    """Ordered conversation history for one session.

    The first message is the only System message. After it, User and
    Assistant messages strictly alternate, starting with User.
    """

    def __init__(self, system_prompt: str):
        self._messages: List[Message] = [Message(Role.SYSTEM, system_prompt)]

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self):
        return iter(self._messages)

    @property
    def messages(self) -> List[Message]:
        return list(self._messages)

    @property
    def awaiting_reply(self) -> bool:
        """True when the last message is a User message with no reply yet."""
        return self._messages[-1].role == Role.USER

    def add_user(self, content: str) -> Message:
        if self.awaiting_reply:
            raise ValueError("Previous user message has not been answered yet")
        return self._append(Message(Role.USER, content))

    def add_assistant(self, content: str) -> Message:
        if not self.awaiting_reply:
            raise ValueError("Assistant reply must follow a user message")
        return self._append(Message(Role.ASSISTANT, content))

    def rollback(self) -> Optional[Message]:
        """Drop a trailing unanswered User message after a failed turn."""
        if self.awaiting_reply:
            return self._messages.pop()
        return None

    def to_messages(self) -> List[Dict[str, str]]:
        return [message.to_dict() for message in self._messages]

    def _append(self, message: Message) -> Message:
        self._messages.append(message)
        return message


class SessionState(str, Enum):
    INIT = "init"
    AWAITING_REPLY = "awaiting_reply"
    PRESENTING = "presenting"
    AWAITING_FOLLOW_UP = "awaiting_follow_up"
    TERMINATED = "terminated"


class ConversationSession:
    """Drives one invocation: ask the model, present, record, maybe repeat.

    One-shot sessions stop after the first reply. Interactive sessions keep
    reading follow-ups until an empty line, ``/exit`` or end of input. Every
    request carries the complete transcript.
    """

    def __init__(
        self,
        config: SnapshellConfig,
        handler: Optional[LLMHandler] = None,
        history: Optional[CommandHistory] = None,
        presenter: Optional[Presenter] = None,
        read_line: Optional[Callable[[], str]] = None,
        interactive: bool = False,
        environment: Optional[str] = None,
    ):
        self.config = config
        self.mode = config.mode
        self.reasoning = config.reasoning
        self.interactive = interactive
        self.handler = handler or LLMHandler(config)
        if history is None and config.history_enabled:
            history = CommandHistory(config.history_file)
        self.history = history
        self.presenter = presenter or Presenter(copy_to_clipboard=config.copy_to_clipboard)
        self.read_line = read_line or self.presenter.read_line

        self.system_prompt = build_system_prompt(
            self.mode,
            self.reasoning,
            show_reasoning=config.show_reasoning,
            override=config.get_system_override(self.mode),
            environment=environment,
        )
        self.transcript = Transcript(self.system_prompt)
        self.state = SessionState.INIT
        self.exit_code = 0

    async def run(self, prompt: str) -> int:
        """Run the session to completion and return the process exit code."""
        turn_prompt = prompt
        self.transcript.add_user(prompt)
        self.state = SessionState.AWAITING_REPLY

        if self.interactive:
            self.presenter.info(
                f"Entering interactive chat mode. Type '{EXIT_TOKEN}' or an empty line to quit."
            )

        while self.state != SessionState.TERMINATED:
            if self.state == SessionState.AWAITING_REPLY:
                response = await self._await_reply()
                if response is not None:
                    self._present(turn_prompt, response)
            elif self.state == SessionState.AWAITING_FOLLOW_UP:
                follow_up = await self._await_follow_up()
                if follow_up is not None:
                    turn_prompt = follow_up

        return self.exit_code

    async def _await_reply(self) -> Optional[LLMResponse]:
        try:
            with self.presenter.status(
                f"Thinking with {self.config.get_current_model()}..."
            ):
                response = await self.handler.complete(
                    self.transcript.to_messages(), self.reasoning
                )
        except TransportError as e:
            self.presenter.error(e, debug=self.config.show_debug)
            self._terminate(1)
            return None
        except ResponseParseError as e:
            self.presenter.error(e, debug=self.config.show_debug)
            if not self.interactive:
                self._terminate(1)
                return None
            # The transcript stays valid; the user may rephrase and try again.
            self.transcript.rollback()
            self.exit_code = 1
            self.state = SessionState.AWAITING_FOLLOW_UP
            return None

        self.transcript.add_assistant(response.content)
        self.state = SessionState.PRESENTING
        return response

    def _present(self, turn_prompt: str, response: LLMResponse) -> ParsedResponse:
        parsed = parse_response(response.content, self.mode)
        if (
            self.config.show_reasoning
            and parsed.reasoning is None
            and response.reasoning is not None
        ):
            parsed = ParsedResponse(parsed.command_or_answer, response.reasoning)

        self.presenter.show_response(parsed, show_reasoning=self.config.show_reasoning)
        self._record(turn_prompt, parsed.command_or_answer)
        self.exit_code = 0

        if self.interactive:
            self.state = SessionState.AWAITING_FOLLOW_UP
        else:
            self._terminate(0)
        return parsed

    def _record(self, prompt: str, command: str) -> None:
        if self.history is None:
            return
        try:
            self.history.append(prompt, command)
        except PersistenceError as e:
            # The command is already on screen; losing the record is not fatal.
            self.presenter.warning(str(e))

    async def _await_follow_up(self) -> Optional[str]:
        try:
            line = await self._read_in_thread()
        except EOFError:
            line = ""

        line = line.strip()
        if not line or line == EXIT_TOKEN:
            self._terminate(self.exit_code)
            return None

        self.transcript.add_user(line)
        self.state = SessionState.AWAITING_REPLY
        return line

    async def _read_in_thread(self) -> str:
        """Run the blocking line reader off the event loop.

        Ctrl-C cancels the awaiting task instead of being lost inside
        ``input()``. The reader thread is a daemon so an abandoned read never
        holds up interpreter exit.
        """
        loop = asyncio.get_running_loop()
        future = loop.create_future()

        def deliver(setter, value):
            if not future.done():
                setter(value)

        def read():
            try:
                line = self.read_line()
            except Exception as e:
                outcome = (future.set_exception, e)
            else:
                outcome = (future.set_result, line)
            if not loop.is_closed():
                loop.call_soon_threadsafe(deliver, *outcome)

        threading.Thread(target=read, name="snapshell-read-line", daemon=True).start()
        return await future

    def _terminate(self, exit_code: int) -> None:
        self.exit_code = exit_code
        self.state = SessionState.TERMINATED
        logger.debug("session terminated with exit code %d", exit_code)
