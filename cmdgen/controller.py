"""
Interaction orchestration for cmdgen.

Runs context -> prompt -> generate -> record for each submission and owns
the edit-then-regenerate state the UI shell renders.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import AbstractSet, List, Optional, Protocol

from .context import ContextProbe
from .delivery import DeliveryMode
from .history import HistoryStore, filter_history
from .llm.types import FailureKind, GenerationResult, GenerationSuccess, ModelParameters, Prompt
from .prompts import assemble_prompt
from .relevance import MAX_SELECTED_TEXT_CHARS, RELEVANT_APPS, filter_context
from .storage import StorageError

logger = logging.getLogger(__name__)


@dataclass
class InteractionState:
    search_text: str = ""
    is_busy: bool = False
    history: List[str] = field(default_factory=list)
    # Bumped on recall so the shell treats the seeded text as freshly typed.
    epoch: int = 0


class UIShell(Protocol):
    def render(self, state: InteractionState) -> None:
        ...

    def show_failure(self, title: str, message: Optional[str] = None) -> None:
        ...

    def show_notice(self, title: str) -> None:
        ...

    def show_hud(self, message: str) -> None:
        ...

    async def deliver(self, command: str, mode: DeliveryMode) -> None:
        ...


class GenerationBackend(Protocol):
    async def generate(
        self, prompt: Prompt, params: Optional[ModelParameters] = None
    ) -> GenerationResult:
        ...


class InteractionController:
    def __init__(
        self,
        shell: UIShell,
        probe: ContextProbe,
        backend: GenerationBackend,
        history: HistoryStore,
        relevant_apps: AbstractSet[str] = RELEVANT_APPS,
        max_selected_chars: int = MAX_SELECTED_TEXT_CHARS,
    ):
        self.shell = shell
        self.probe = probe
        self.backend = backend
        self.history = history
        self.relevant_apps = relevant_apps
        self.max_selected_chars = max_selected_chars
        self.state = InteractionState()

    async def load(self) -> None:
        """Fetch persisted history into the cached state."""
        self.state.history = await self.history.list()
        self._render()

    def set_search_text(self, text: str) -> None:
        self.state.search_text = text

    @property
    def show_generate_item(self) -> bool:
        return bool(self.state.search_text.strip())

    def visible_history(self) -> List[str]:
        return filter_history(self.state.history, self.state.search_text)

    def recall(self, entry: str) -> None:
        """Seed the search text with a past request for editing; never generates."""
        self.state.search_text = entry
        self.state.epoch += 1
        logger.debug(f"Recalled history entry (epoch {self.state.epoch})")
        self._render()

    async def clear_history(self) -> None:
        try:
            self.state.history = await self.history.clear()
        except StorageError as e:
            logger.error(f"Could not clear history: {e}")
            self.shell.show_failure("Could not clear history", str(e))
            return
        self.shell.show_notice("History cleared")
        self._render()

    async def submit(
        self,
        text: Optional[str] = None,
        mode: DeliveryMode = DeliveryMode.PASTE,
    ) -> Optional[GenerationResult]:
        """
        Generate a command for text (default: the current search text) and deliver it.

        Returns:
            The GenerationResult, or None if the submission was rejected or
            failed unexpectedly.
        """
        request = self.state.search_text if text is None else text

        if self.state.is_busy:
            logger.warning("Submission ignored: a generation is already in flight")
            return None
        if not request.strip():
            self.shell.show_failure("Please enter a description")
            return None

        self._set_busy(True)
        try:
            result = await self._generate(request)
            if isinstance(result, GenerationSuccess):
                await self._complete(request, result.command, mode)
            else:
                self._report_failure(result)
            return result
        except asyncio.CancelledError:
            logger.debug("Generation cancelled")
            raise
        except Exception as e:
            logger.exception("Generation failed")
            self.shell.show_failure("Error", str(e) or "Unknown error")
            return None
        finally:
            self._set_busy(False)

    async def _generate(self, request: str) -> GenerationResult:
        raw = await self.probe.acquire()
        context = filter_context(raw, self.relevant_apps, self.max_selected_chars)
        prompt = assemble_prompt(request, context)
        return await self.backend.generate(prompt)

    async def _complete(self, request: str, command: str, mode: DeliveryMode) -> None:
        history_error: Optional[StorageError] = None
        try:
            self.state.history = await self.history.record(request)
        except StorageError as e:
            logger.error(f"Could not save history: {e}")
            history_error = e

        # The command is delivered even if bookkeeping failed.
        await self.shell.deliver(command, mode)
        self.shell.show_hud(mode.acknowledgment)
        if history_error is not None:
            self.shell.show_failure("History not saved", str(history_error))

    def _report_failure(self, failure) -> None:
        logger.info(f"Generation failed ({failure.kind.value}): {failure.message}")
        if failure.kind is FailureKind.EMPTY_RESPONSE:
            self.shell.show_failure("No command generated")
        else:
            self.shell.show_failure("Error", failure.message)

    def _set_busy(self, busy: bool) -> None:
        self.state.is_busy = busy
        self._render()

    def _render(self) -> None:
        self.shell.render(self.state)
