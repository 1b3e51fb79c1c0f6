"""
Clipboard delivery of generated commands.

Copying goes through pyperclip; pasting into the frontmost app sends a
Cmd-V keystroke with osascript (macOS only).
"""

import asyncio
import logging
from enum import Enum

import pyperclip

logger = logging.getLogger(__name__)

PASTE_SCRIPT = 'tell application "System Events" to keystroke "v" using command down'


class DeliveryMode(str, Enum):
    PASTE = "paste"
    COPY = "copy"

    @property
    def acknowledgment(self) -> str:
        return "Command pasted" if self is DeliveryMode.PASTE else "Command copied"


class DeliveryError(Exception):
    """The command could not be placed on the clipboard or pasted."""


class MacClipboard:
    async def copy(self, text: str) -> None:
        try:
            await asyncio.to_thread(pyperclip.copy, text)
        except pyperclip.PyperclipException as e:
            raise DeliveryError(f"Clipboard not available: {e}") from e
        logger.debug("Copied command to clipboard")

    async def paste(self, text: str) -> None:
        """Put text on the clipboard and paste it into the frontmost app."""
        await self.copy(text)
        try:
            proc = await asyncio.create_subprocess_exec(
                "osascript", "-e", PASTE_SCRIPT,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise DeliveryError(f"osascript unavailable: {e}") from e
        _, stderr = await proc.communicate()
        if proc.returncode != 0:
            raise DeliveryError(f"osascript failed: {stderr.decode(errors='replace').strip()}")
        logger.debug("Pasted command into frontmost app")
