"""ConversationStore for managing the ordered turn log.

This module provides the ConversationStore class which handles:
- Appending turns in order
- Resetting the conversation
- Taking immutable snapshots
- Saving the conversation to, and loading it from, a JSON file
"""

import json
import logging
from pathlib import Path
from typing import Iterator

from stick_gpt.conversation.types import Turn

logger = logging.getLogger(__name__)


class ConversationStore:
    """Ordered, append-only log of conversation turns.

    The log is persisted as a JSON list of turn records:
    [
        {"role": "user", "content": "..."},
        {"role": "assistant", "content": "", "tool_calls": [...]},
        {"role": "tool", "content": "...", "tool_call_id": "..."},
        ...
    ]
    """

    def __init__(self, turns: list[Turn] | None = None):
        """Initialize a ConversationStore.

        Args:
            turns: Initial turn history (default: empty)
        """
        self._turns: list[Turn] = list(turns or [])

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(self.snapshot())

    def append(self, turn: Turn) -> None:
        """Append a turn to the end of the conversation.

        Args:
            turn: The turn to append
        """
        self._turns.append(turn)

    def reset(self) -> None:
        """Clear the conversation."""
        self._turns = []
        logger.debug("Conversation reset")

    def snapshot(self) -> tuple[Turn, ...]:
        """Return an immutable copy of the current turns."""
        return tuple(self._turns)

    def to_list(self) -> list[dict]:
        """Convert the conversation to a list of dictionaries for JSON serialization."""
        return [turn.to_dict() for turn in self._turns]

    def persist(self, path: Path | str) -> None:
        """Save the full conversation to a JSON file.

        Args:
            path: Destination file; parent directories are created
        """
        file_path = Path(path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(self.to_list(), f, indent=2, ensure_ascii=False)

        logger.debug(f"Saved {len(self._turns)} turns to {file_path}")

    def restore(self, path: Path | str) -> bool:
        """Replace the conversation with the contents of a JSON file.

        A missing file is not an error: the current turns are left untouched.

        Args:
            path: File previously written by persist()

        Returns:
            True if the file existed and was loaded, False otherwise

        Raises:
            ValueError: If the file does not contain a list of valid turn records
        """
        file_path = Path(path)

        if not file_path.exists():
            logger.debug(f"No conversation file at {file_path}, keeping current state")
            return False

        with open(file_path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Conversation file {file_path} is not valid JSON: {e}")

        if not isinstance(data, list):
            raise ValueError(f"Conversation file {file_path} must contain a list of turns")

        try:
            turns = [Turn.from_dict(item) for item in data]
        except (AttributeError, KeyError, TypeError) as e:
            raise ValueError(f"Conversation file {file_path} has an invalid turn: {e}")
        self._turns = turns

        logger.debug(f"Loaded {len(turns)} turns from {file_path}")
        return True
