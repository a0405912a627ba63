"""System prompt construction for snapshell."""

import platform
from pathlib import Path
from typing import Optional

from .config import Mode, ReasoningLevel

NOT_ABLE_SENTINEL = "(NOT ABLE TO ANSWER):"

_SENTINEL_CLAUSE = (
    "If you do NOT know the correct command, respond exactly with the following "
    f"format and nothing else: {NOT_ABLE_SENTINEL} <one-sentence reason>. The "
    "reason should be a single short sentence explaining why the command cannot "
    "be provided."
)

_STRICT_PREAMBLE = (
    "You are a strict shell command generator. OUTPUT ONLY shell commands or "
    "shell syntax in plain text with no explanations, no commentary, and no "
    "additional prose. DO NOT output any markdown, code fences, backticks, or "
    "formatting of any kind."
)

DEFAULT_SINGLE_LINE_PROMPT = (
    f"{_STRICT_PREAMBLE} The entire response MUST be a single-line shell command "
    "with no extra text. Never add numbering, bullets, examples, or any text "
    f"before or after the command. {_SENTINEL_CLAUSE} Always respond only with "
    "the shell command or the one-line failure phrase in the format above."
)

DEFAULT_MULTILINE_PROMPT = (
    f"{_STRICT_PREAMBLE} Multi-line shell scripts are allowed when necessary. "
    "Never add numbering, bullets, examples, or any text before or after the "
    f"script. {_SENTINEL_CLAUSE} Always respond only with the shell command(s) "
    "or the one-line failure phrase in the format above."
)

OVERRIDE_SUFFIXES = {
    Mode.SINGLE: (
        "Respond with only a single-line shell command and nothing else. "
        + _SENTINEL_CLAUSE
    ),
    Mode.MULTILINE: (
        "Respond with only a shell script and nothing else. " + _SENTINEL_CLAUSE
    ),
}

REASONING_CLAUSE = (
    "After the command, add exactly one final line containing a compact JSON "
    'object of the form {"reasoning": "<one sentence>"} that briefly explains '
    "the command. Do not put anything after that line."
)

OS_RELEASE_PATH = Path("/etc/os-release")


def build_system_prompt(
    mode: Mode,
    reasoning_level: ReasoningLevel = ReasoningLevel.LOW,
    show_reasoning: bool = False,
    override: Optional[str] = None,
    environment: Optional[str] = None,
) -> str:
    """Assemble the system instruction for a session.

    Args:
        mode: Single-line command or multiline script.
        reasoning_level: Request-level hint; it is sent alongside the request
            and does not change the instruction text.
        show_reasoning: Ask for a trailing ``{"reasoning": ...}`` line.
        override: User-supplied instruction used in place of the default.
        environment: Target OS description appended as a compatibility note.

    Returns:
        The system message content.
    """
    if override:
        parts = [override.strip(), OVERRIDE_SUFFIXES[mode]]
    elif mode == Mode.MULTILINE:
        parts = [DEFAULT_MULTILINE_PROMPT]
    else:
        parts = [DEFAULT_SINGLE_LINE_PROMPT]

    if show_reasoning:
        parts.append(REASONING_CLAUSE)

    if environment:
        parts.append(
            f"Target environment: {environment}. Ensure generated commands are "
            "compatible with this environment."
        )

    return " ".join(parts)


def detect_environment(os_release: Path = OS_RELEASE_PATH) -> str:
    """Describe the host OS so the model can tailor its commands."""
    system = platform.system()
    if system == "Darwin":
        return "macos"
    if system == "Windows":
        return "windows"
    if system != "Linux":
        return "unknown"

    try:
        release = os_release.read_text(encoding="utf-8").lower()
    except OSError:
        return "linux"

    if "debian" in release or "ubuntu" in release:
        return "linux (debian/ubuntu)"
    if "fedora" in release:
        return "linux (fedora)"
    if "arch" in release:
        return "linux (arch)"
    return "linux"
