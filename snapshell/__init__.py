"""snapshell - snappy shell command generation from natural language.

This package turns a plain-English request into a shell command using a
remote LLM, then prints it, copies it to the clipboard and records it in an
append-only history. Two modes are available:

- One-shot: a single request and a single command
- Interactive chat: follow-up questions refine the answer within one transcript

Any OpenAI-compatible endpoint works; OpenRouter is the default.
"""

from .config import SnapshellConfig
from .history import CommandHistory
from .llm_handler import LLMHandler
from .main import app
from .parser import ParsedResponse, parse_response
from .session import ConversationSession

__version__ = "0.1.0"

__all__ = [
    "app",
    "SnapshellConfig",
    "LLMHandler",
    "CommandHistory",
    "ConversationSession",
    "ParsedResponse",
    "parse_response",
]
