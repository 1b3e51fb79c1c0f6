"""
Ambient context acquisition for cmdgen.

Collects the selected text, the application the user came from and, for
supported terminals, its working directory. Every signal is optional:
a failed query leaves the field as None instead of raising.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol

logger = logging.getLogger(__name__)

OSASCRIPT_TIMEOUT = 3.0


@dataclass(frozen=True)
class RawContext:
    """Signals captured at request time. Never persisted."""

    selected_text: Optional[str] = None
    foreground_app: Optional[str] = None
    working_directory: Optional[str] = None


class Environment(Protocol):
    """OS query boundary. Each method returns None when the signal is unavailable."""

    async def get_selected_text(self) -> Optional[str]:
        ...

    async def get_foreground_application_name(self) -> Optional[str]:
        ...

    async def run_applescript(self, script: str) -> Optional[str]:
        ...


# Frontmost process is the launcher itself, so the app the user came from
# is the first visible process that is not frontmost.
FOREGROUND_APP_SCRIPT = """
tell application "System Events"
  set appList to name of every application process whose visible is true and frontmost is false
  if (count of appList) > 0 then
    return item 1 of appList
  end if
end tell
"""

SELECTED_TEXT_SCRIPT = """
tell application "System Events"
  set procList to every application process whose visible is true and frontmost is false
  if (count of procList) > 0 then
    set focusedElement to value of attribute "AXFocusedUIElement" of (item 1 of procList)
    return value of attribute "AXSelectedText" of focusedElement
  end if
end tell
"""

# Per-terminal strategies, tried in order until one returns a non-empty value.
TERMINAL_DIRECTORY_SCRIPTS: Dict[str, List[str]] = {
    "Terminal": [
        'tell application "Terminal" to get custom title of selected tab of front window',
        # Fallback: the window name often contains the path
        'tell application "Terminal" to get name of front window',
    ],
    "iTerm2": [
        'tell application "iTerm2" to tell current session of current window to get variable named "path"',
    ],
    "iTerm": [
        'tell application "iTerm2" to tell current session of current window to get variable named "path"',
    ],
}


class AppleScriptEnvironment:
    """macOS environment backed by osascript."""

    def __init__(self, osascript: str = "osascript", timeout: float = OSASCRIPT_TIMEOUT):
        self.osascript = osascript
        self.timeout = timeout

    async def run_applescript(self, script: str) -> Optional[str]:
        """Run a script, returning stripped stdout or None on any failure."""
        try:
            proc = await asyncio.create_subprocess_exec(
                self.osascript, "-e", script,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.debug(f"osascript unavailable: {e}")
            return None

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            logger.debug("osascript timed out")
            return None

        if proc.returncode != 0:
            logger.debug(f"osascript failed ({proc.returncode}): {stderr.decode(errors='replace').strip()}")
            return None
        return stdout.decode(errors="replace").strip() or None

    async def get_selected_text(self) -> Optional[str]:
        return await self.run_applescript(SELECTED_TEXT_SCRIPT)

    async def get_foreground_application_name(self) -> Optional[str]:
        return await self.run_applescript(FOREGROUND_APP_SCRIPT)


class ContextProbe:
    """Stateless probe; acquire() may be called once per request."""

    def __init__(
        self,
        environment: Environment,
        directory_scripts: Optional[Dict[str, List[str]]] = None,
    ):
        self.environment = environment
        self.directory_scripts = (
            TERMINAL_DIRECTORY_SCRIPTS if directory_scripts is None else directory_scripts
        )

    async def acquire(self) -> RawContext:
        selected_text = await self._query(self.environment.get_selected_text, "selected text")
        foreground_app = await self._query(
            self.environment.get_foreground_application_name, "foreground app"
        )
        working_directory = None
        if foreground_app in self.directory_scripts:
            working_directory = await self._terminal_directory(foreground_app)

        context = RawContext(
            selected_text=selected_text,
            foreground_app=foreground_app,
            working_directory=working_directory,
        )
        logger.debug(
            f"Context: app={foreground_app!r} dir={working_directory!r} "
            f"selected={len(selected_text) if selected_text else 0} chars"
        )
        return context

    async def _terminal_directory(self, app: str) -> Optional[str]:
        for script in self.directory_scripts[app]:
            directory = await self._query(
                lambda: self.environment.run_applescript(script), f"{app} directory"
            )
            if directory:
                return directory
        return None

    @staticmethod
    async def _query(fetch, label: str) -> Optional[str]:
        """Absence is not failure: any error degrades the signal to None."""
        try:
            value = await fetch()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.debug(f"Could not read {label}: {e}")
            return None
        return value or None
