"""Parsing of raw model completions into a command and optional reasoning."""

import json
import logging
from dataclasses import dataclass
from typing import Optional

from .config import Mode
from .prompts import NOT_ABLE_SENTINEL

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParsedResponse:
    """A completion split into its command (or answer) and reasoning."""

    command_or_answer: str
    reasoning: Optional[str] = None

    @property
    def is_unanswerable(self) -> bool:
        """Whether the model declined with the sentinel prefix."""
        return self.command_or_answer.lower().startswith(NOT_ABLE_SENTINEL.lower())

    @property
    def has_multiple_lines(self) -> bool:
        lines = [line for line in self.command_or_answer.splitlines() if line.strip()]
        return len(lines) > 1

    def reasoning_json(self) -> Optional[str]:
        """Reasoning in its canonical compact form, ``{"reasoning": "..."}``."""
        if self.reasoning is None:
            return None
        return json.dumps({"reasoning": self.reasoning}, ensure_ascii=False)


def _extract_reasoning(line: str) -> Optional[str]:
    """Return the reasoning text if ``line`` is a reasoning JSON object."""
    candidate = line.strip()
    if not (candidate.startswith("{") and candidate.endswith("}")):
        return None
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    reasoning = data.get("reasoning")
    if not isinstance(reasoning, str):
        return None
    return reasoning


def parse_response(raw_text: str, mode: Mode = Mode.SINGLE) -> ParsedResponse:
    """Split a completion into command and trailing reasoning.

    Only a compact, single-line JSON object on the last line is recognised.
    Anything else, including malformed JSON, stays part of the command text.
    This function never raises on model output.
    """
    text = (raw_text or "").strip()

    head, _, last_line = text.rpartition("\n")
    reasoning = _extract_reasoning(last_line)
    if reasoning is not None:
        parsed = ParsedResponse(command_or_answer=head.strip(), reasoning=reasoning)
    else:
        parsed = ParsedResponse(command_or_answer=text)

    if mode == Mode.SINGLE and parsed.has_multiple_lines:
        logger.warning(
            "Model returned %d lines in single-line mode; showing output as-is",
            len(parsed.command_or_answer.splitlines()),
        )

    return parsed
