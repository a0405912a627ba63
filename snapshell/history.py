"""Append-only command history stored as JSON lines."""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Union

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """History file could not be written or read."""

    pass


def _from_epoch(seconds: float) -> datetime:
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError) as e:
        raise ValueError(f"timestamp out of range: {seconds!r}") from e


def _parse_timestamp(value: Union[str, int, float]) -> datetime:
    """Accept ISO-8601 text or epoch seconds (as a number or numeric text)."""
    if isinstance(value, bool):
        raise ValueError("timestamp must not be a boolean")
    if isinstance(value, (int, float)):
        return _from_epoch(value)
    if not isinstance(value, str):
        raise ValueError(f"unsupported timestamp: {value!r}")

    text = value.strip()
    try:
        seconds = float(text)
    except ValueError:
        pass
    else:
        return _from_epoch(seconds)

    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class HistoryEntry:
    """One persisted (timestamp, prompt, command) record."""

    timestamp: datetime
    prompt: str
    command: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert entry to its on-disk dictionary format."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "prompt": self.prompt,
            "command": self.command,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryEntry":
        """Create entry from its on-disk dictionary format.

        Raises:
            ValueError: If a field is missing or has the wrong type.
        """
        if not isinstance(data, dict):
            raise ValueError("history record must be a JSON object")
        try:
            prompt = data["prompt"]
            command = data["command"]
            timestamp = data["timestamp"]
        except KeyError as e:
            raise ValueError(f"missing field {e}") from e
        if not isinstance(prompt, str) or not isinstance(command, str):
            raise ValueError("prompt and command must be strings")
        return cls(timestamp=_parse_timestamp(timestamp), prompt=prompt, command=command)


class HistoryReader:
    """Lazy, restartable view over the history file.

    Each iteration re-opens the file and yields entries oldest first.
    Lines that cannot be parsed are skipped; ``skipped`` holds the count from
    the most recent pass.
    """

    def __init__(self, path: Path):
        self.path = path
        self.skipped = 0

    def __iter__(self) -> Iterator[HistoryEntry]:
        self.skipped = 0
        if not self.path.exists():
            return

        try:
            f = open(self.path, "r", encoding="utf-8", errors="replace")
        except OSError as e:
            raise PersistenceError(f"Cannot read history file {self.path}: {e}") from e

        with f:
            for line_number, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    entry = HistoryEntry.from_dict(json.loads(line))
                except ValueError as e:
                    # json.JSONDecodeError is a ValueError too
                    self.skipped += 1
                    logger.debug("Skipping history line %d: %s", line_number, e)
                    continue
                yield entry


class CommandHistory:
    """Owns the history file; the only writer of it."""

    def __init__(self, path: Optional[Path] = None):
        if path is None:
            path = Path.home() / ".snapshell" / "history.jsonl"
        self.path = Path(path)

    def append(
        self, prompt: str, command: str, timestamp: Optional[datetime] = None
    ) -> HistoryEntry:
        """Append one record to the history file.

        The record is written with a single unbuffered write on a handle opened
        in append mode, so records from concurrent processes never interleave.

        Raises:
            PersistenceError: If the file or its directory cannot be written.
        """
        entry = HistoryEntry(
            timestamp=timestamp or datetime.now(timezone.utc),
            prompt=prompt,
            command=command,
        )
        data = (json.dumps(entry.to_dict(), ensure_ascii=False) + "\n").encode("utf-8")

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "ab", buffering=0) as f:
                f.write(data)
        except OSError as e:
            raise PersistenceError(f"Cannot write history file {self.path}: {e}") from e

        logger.debug("Recorded history entry in %s", self.path)
        return entry

    def read_all(self) -> HistoryReader:
        """Return a lazy sequence over every readable entry."""
        return HistoryReader(self.path)
