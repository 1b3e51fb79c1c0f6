"""
Terminal UI shell for cmdgen.

Implements the controller's UIShell boundary on a plain terminal: notices go
to stderr, pasted commands go to stdout (where a shell keybinding widget can
pick them up) or into the frontmost app, copied commands go to the clipboard.
"""

import readline
import sys
from typing import List, Optional, TextIO

from .controller import InteractionController, InteractionState
from .delivery import DeliveryMode, MacClipboard

PROMPT = "cmdgen> "

HELP_TEXT = """Describe the command you need and press Enter.
  :copy <text>       generate and copy to the clipboard instead
  :history [query]   list past requests (filtered by query)
  :recall N          load entry N from the last listing for editing
  :clear             clear history
  :quit              exit"""


class TerminalShell:
    def __init__(
        self,
        clipboard: Optional[MacClipboard] = None,
        out: Optional[TextIO] = None,
        err: Optional[TextIO] = None,
        paste_target: str = "stdout",
    ):
        self.clipboard = clipboard or MacClipboard()
        # "stdout" hands the command to a shell widget; "frontmost" pastes
        # it into the app the user came from.
        self.paste_target = paste_target
        self.out = out or sys.stdout
        self.err = err or sys.stderr
        self.last_listing: List[str] = []
        self._seen_epoch = 0
        self._prefill = ""
        self.failed = False

    # UIShell boundary

    def render(self, state: InteractionState) -> None:
        if state.epoch != self._seen_epoch:
            self._seen_epoch = state.epoch
            self._prefill = state.search_text
        if state.is_busy:
            print("Generating...", file=self.err)

    def show_failure(self, title: str, message: Optional[str] = None) -> None:
        self.failed = True
        text = f"{title}: {message}" if message else title
        print(f"cmdgen: {text}", file=self.err)

    def show_notice(self, title: str) -> None:
        print(title, file=self.err)

    def show_hud(self, message: str) -> None:
        print(message, file=self.err)

    async def deliver(self, command: str, mode: DeliveryMode) -> None:
        if mode is DeliveryMode.COPY:
            await self.clipboard.copy(command)
        elif self.paste_target == "frontmost":
            await self.clipboard.paste(command)
        else:
            print(command, end="", file=self.out)
            if self.out.isatty():
                print(file=self.out)
            self.out.flush()

    # Terminal input

    def read_line(self) -> str:
        """Prompt for input, pre-filling text seeded by a recall."""
        prefill, self._prefill = self._prefill, ""
        readline.set_startup_hook(lambda: readline.insert_text(prefill) if prefill else None)
        try:
            return input(PROMPT)
        finally:
            readline.set_startup_hook()

    def list_entries(self, entries: List[str]) -> None:
        self.last_listing = list(entries)
        if not entries:
            print("(no history)", file=self.err)
            return
        print("History", file=self.err)
        for index, entry in enumerate(entries, 1):
            print(f"  {index:>2}. {entry}", file=self.err)


async def handle_line(controller: InteractionController, shell: TerminalShell, line: str) -> bool:
    """Dispatch one input line. Returns False when the session should end."""
    command, _, argument = line.strip().partition(" ")
    if not command.startswith(":"):
        controller.set_search_text(line)
        await controller.submit(mode=DeliveryMode.PASTE)
        return True

    if command in (":quit", ":q"):
        return False
    if command == ":help":
        print(HELP_TEXT, file=shell.err)
    elif command == ":copy":
        controller.set_search_text(argument)
        await controller.submit(mode=DeliveryMode.COPY)
    elif command == ":history":
        controller.set_search_text(argument)
        shell.list_entries(controller.visible_history())
    elif command == ":recall":
        try:
            index = int(argument)
        except ValueError:
            index = 0
        # Listings are numbered from 1; reject 0 and negatives outright.
        if 1 <= index <= len(shell.last_listing):
            controller.recall(shell.last_listing[index - 1])
        else:
            shell.show_failure("No such history entry", argument or None)
    elif command == ":clear":
        await controller.clear_history()
    else:
        shell.show_failure("Unknown command", command)
    return True


async def run_interactive(controller: InteractionController, shell: TerminalShell) -> None:
    await controller.load()
    print(HELP_TEXT, file=shell.err)
    shell.list_entries(controller.visible_history())
    while True:
        try:
            # Nothing else runs between submissions, so blocking is fine.
            line = shell.read_line()
        except (EOFError, KeyboardInterrupt):
            print(file=shell.err)
            break
        if not await handle_line(controller, shell, line):
            break
