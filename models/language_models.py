"""Models describing the active display language and displayed text."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Literal

__all__: list[str] = ["LANGUAGE_NAMES", "DisplayState", "LanguageState", "ResolutionState"]

type ResolutionState = Literal["idle", "resolving"]

LANGUAGE_NAMES: Final[dict[str, str]] = {
    "zh": "中文",
    "en": "English",
}


@dataclass(frozen=True)
class LanguageState:
    """Snapshot of the language context.

    Attributes:
        active_language (str): Language code currently displayed.
        is_resolving (bool): Whether any translation is waiting on a strategy.
    """

    active_language: str
    is_resolving: bool = False

    @property
    def resolution_state(self) -> ResolutionState:
        return "resolving" if self.is_resolving else "idle"


@dataclass(frozen=True)
class DisplayState:
    """Text a display adapter currently renders.

    Attributes:
        text (str): Text to render.
        is_pending (bool): True while `text` is a placeholder awaiting translation.
        error (str | None): Failure notice shown next to the original text.
    """

    text: str
    is_pending: bool = False
    error: str | None = None
