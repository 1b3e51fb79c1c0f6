"""
Relevance rules deciding which captured context reaches the prompt.
"""

from dataclasses import dataclass
from typing import AbstractSet, Optional

from .context import RawContext

# Developer tools whose name is worth telling the model about. Any other
# foreground app (browser, chat client) is noise.
RELEVANT_APPS = frozenset({
    "Terminal",
    "iTerm2",
    "iTerm",
    "Hyper",
    "Warp",
    "Alacritty",
    "kitty",
    "Code",
    "Cursor",
    "Zed",
    "Sublime Text",
    "Atom",
    "WebStorm",
    "IntelliJ IDEA",
    "PyCharm",
    "Visual Studio Code",
})

# Longer selections would bury the request.
MAX_SELECTED_TEXT_CHARS = 2000


@dataclass(frozen=True)
class FilteredContext:
    selected_text: Optional[str] = None
    foreground_app: Optional[str] = None
    working_directory: Optional[str] = None

    def is_empty(self) -> bool:
        return not (self.selected_text or self.foreground_app or self.working_directory)


def filter_context(
    raw: RawContext,
    relevant_apps: AbstractSet[str] = RELEVANT_APPS,
    max_selected_chars: int = MAX_SELECTED_TEXT_CHARS,
) -> FilteredContext:
    """Apply each rule independently of the others."""
    app = raw.foreground_app if raw.foreground_app in relevant_apps else None
    # Only ever captured from a supported terminal, so keep it when present.
    directory = raw.working_directory or None
    selected = raw.selected_text
    if not selected or len(selected) >= max_selected_chars:
        selected = None
    return FilteredContext(
        selected_text=selected,
        foreground_app=app,
        working_directory=directory,
    )
