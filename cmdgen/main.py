"""
cmdgen entrypoint.

Interactive when stdin is a terminal. Otherwise reads one JSON request
from stdin, e.g. {"query": "...", "action": "paste"}, and exits non-zero
on failure; in "paste" mode the command is printed to stdout.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path


ACTIONS = ("paste", "copy", "history", "clear")


def build_controller(shell):
    """Wire the controller's collaborators from configuration."""
    # Import here to keep startup fast if there's an early exit
    from . import config_file
    from .context import AppleScriptEnvironment, ContextProbe
    from .controller import InteractionController
    from .history import HistoryStore
    from .llm.manager import LLMManager
    from .relevance import RELEVANT_APPS
    from .storage import LocalStorage

    storage_path = config_file.get("storage_path")
    storage = LocalStorage(Path(storage_path) if storage_path else None)
    relevant_apps = config_file.get("relevant_apps")
    return InteractionController(
        shell=shell,
        probe=ContextProbe(AppleScriptEnvironment()),
        backend=LLMManager(),
        history=HistoryStore(storage, max_entries=config_file.get("history_limit")),
        relevant_apps=frozenset(relevant_apps) if relevant_apps else RELEVANT_APPS,
        max_selected_chars=config_file.get("selected_text_limit"),
    )


async def run_once(controller, shell, request: dict) -> int:
    """Handle one JSON request. Returns the process exit status."""
    from .delivery import DeliveryMode

    action = request.get("action", "paste")
    if action not in ACTIONS:
        shell.show_failure("Unknown action", str(action))
        return 1

    field = "filter" if action == "history" else "query"
    text = request.get(field, "")
    if not isinstance(text, str):
        shell.show_failure("Invalid request", f"'{field}' must be a string")
        return 1

    await controller.load()
    if action == "history":
        controller.set_search_text(text)
        for entry in controller.visible_history():
            print(entry, file=shell.out)
        return 0
    if action == "clear":
        await controller.clear_history()
        return 1 if shell.failed else 0

    controller.set_search_text(text)
    result = await controller.submit(mode=DeliveryMode(action))
    if result is None or not result.ok:
        return 1
    return 0


def _configure_logging():
    from . import config_file

    logging.basicConfig(
        level=logging.DEBUG if config_file.get("debug") else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def main():
    """Run interactively, or process one stdin request and print the command."""
    try:
        _configure_logging()
        from . import config_file
        from .shell import TerminalShell, run_interactive

        shell = TerminalShell(paste_target=config_file.get("paste_target"))
        controller = build_controller(shell)

        if sys.stdin.isatty():
            asyncio.run(run_interactive(controller, shell))
            sys.exit(0)

        # Read JSON from stdin
        raw = sys.stdin.read().strip()
        if not raw:
            sys.exit(1)

        request = json.loads(raw)
        if not isinstance(request, dict):
            sys.exit(1)

        sys.exit(asyncio.run(run_once(controller, shell, request)))

    except json.JSONDecodeError:
        print("cmdgen: stdin is not valid JSON", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(1)


if __name__ == "__main__":
    main()
