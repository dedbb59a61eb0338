"""External editor integration."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import tempfile
from pathlib import Path

from sqli.shared.core.errors import EditorError

logger = logging.getLogger(__name__)

DEFAULT_EDITOR = "vim"


def get_editor_command() -> list[str]:
    """Resolve the editor command from $VISUAL / $EDITOR."""
    editor = os.environ.get("VISUAL") or os.environ.get("EDITOR") or DEFAULT_EDITOR
    return shlex.split(editor)


def edit(text: str, extension: str = "sql") -> str:
    """Open ``text`` in the user's editor and return the edited content.

    Blocks until the editor exits. Callers running inside a Textual app must
    suspend the app around this call.
    """
    path = Path(tempfile.gettempdir()) / f"sqli_edit_{os.getpid()}.{extension}"
    command = get_editor_command() + [str(path)]
    logger.debug("Launching editor: %s", command)
    try:
        path.write_text(text, encoding="utf-8")
        try:
            completed = subprocess.run(command, check=False)
        except OSError as e:
            raise EditorError(f"Failed to launch editor: {e}") from e
        if completed.returncode != 0:
            raise EditorError("Editor exited with error")
        return path.read_text(encoding="utf-8")
    except EditorError:
        raise
    except OSError as e:
        raise EditorError(str(e)) from e
    finally:
        try:
            path.unlink()
        except OSError:
            pass
