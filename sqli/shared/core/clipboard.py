"""System clipboard access through pyperclip, when it is installed."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def copy_text(text: str) -> bool:
    """Copy ``text`` to the system clipboard. Returns False if no clipboard is available."""
    try:
        import pyperclip
    except ImportError:
        logger.debug("pyperclip is not installed; clipboard unavailable")
        return False

    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        logger.debug("Clipboard copy failed: %s", e)
        return False
    return True
