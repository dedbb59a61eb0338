"""Password resolution for connection descriptors."""

from __future__ import annotations

import logging
import shlex
import subprocess

from sqli.domains.connections.domain.config import ConnectionConfig
from sqli.shared.core.errors import DatabaseConnectionError

logger = logging.getLogger(__name__)

PASSWORD_CMD_TIMEOUT = 30


def resolve_password(config: ConnectionConfig) -> str | None:
    """Return the password for ``config``.

    ``password_cmd`` takes precedence over a stored password; its stdout,
    stripped of surrounding whitespace, is the password.
    """
    if not config.password_cmd:
        return config.password

    logger.debug("Running password command for %s", config.name)
    try:
        completed = subprocess.run(
            shlex.split(config.password_cmd),
            capture_output=True,
            text=True,
            timeout=PASSWORD_CMD_TIMEOUT,
            check=False,
        )
    except (OSError, ValueError, subprocess.TimeoutExpired) as e:
        raise DatabaseConnectionError(f"password_cmd failed: {e}") from e
    if completed.returncode != 0:
        detail = completed.stderr.strip() or f"exit status {completed.returncode}"
        raise DatabaseConnectionError(f"password_cmd failed: {detail}")
    return completed.stdout.strip()
