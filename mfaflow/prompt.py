"""Interactive prompt surface used by code-entry strategies."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class PromptOptions:
    title: str = ""
    placeholder: str = ""
    confirm_label: str = "Submit"
    input_kind: str = "text"
    pattern: Optional[str] = None


class Prompt(Protocol):
    def ask(self, message: str, options: PromptOptions) -> Optional[str]:
        """Return the user's input, or ``None`` when the user cancels."""
        ...


class ConsolePrompt:
    """Prompt that reads answers from the terminal."""

    def ask(self, message: str, options: PromptOptions) -> Optional[str]:
        if options.title:
            print(f"\n== {options.title} ==")
        print(message)
        label = options.placeholder or options.confirm_label
        try:
            answer = input(f"{label}: ")
        except (EOFError, KeyboardInterrupt):
            LOGGER.info("Prompt dismissed")
            return None
        answer = answer.strip()
        return answer or None
