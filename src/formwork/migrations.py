"""
Database migration runner.

Runs the migration command (alembic by default) inside the generated
backend after generation. The subprocess is always reaped: on timeout or
interrupt it is terminated, then killed if it ignores the request.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from .core.errors import MigrationError

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = ("alembic", "upgrade", "head")
DEFAULT_TIMEOUT = 120.0
TERMINATE_GRACE = 5.0


@dataclass(frozen=True)
class MigrationResult:
    command: tuple[str, ...]
    returncode: int
    output: str


def _stop(process: subprocess.Popen[str], grace: float) -> str:
    """Terminate the process, kill it after `grace` seconds, return its output."""
    process.terminate()
    try:
        output, _ = process.communicate(timeout=grace)
    except subprocess.TimeoutExpired:
        logger.warning("Migration process %d ignored terminate; killing", process.pid)
        process.kill()
        output, _ = process.communicate()
    return output or ""


def run_migrations(
    workdir: Path,
    command: Sequence[str] = DEFAULT_COMMAND,
    timeout: float = DEFAULT_TIMEOUT,
    grace: float = TERMINATE_GRACE,
) -> MigrationResult:
    """
    Run the migration command in `workdir`.

    Args:
        workdir: Directory containing alembic.ini (the generated backend)
        command: Command and arguments
        timeout: Seconds before the process is terminated
        grace: Seconds to wait after terminate before killing

    Returns:
        MigrationResult with the combined stdout/stderr

    Raises:
        MigrationError: If the executable is missing, the command exits
            non-zero, times out, or is interrupted
    """
    argv = tuple(command)
    logger.debug("Running %s in %s", " ".join(argv), workdir)
    try:
        process = subprocess.Popen(
            argv,
            cwd=workdir,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )
    except FileNotFoundError as e:
        raise MigrationError(f"Migration command not found: {argv[0]}") from e

    try:
        output, _ = process.communicate(timeout=timeout)
    except subprocess.TimeoutExpired as e:
        output = _stop(process, grace)
        raise MigrationError(
            f"Migration timed out after {timeout:g}s: {' '.join(argv)}",
            output=output,
            returncode=process.returncode,
        ) from e
    except KeyboardInterrupt as e:
        output = _stop(process, grace)
        raise MigrationError(
            f"Migration interrupted: {' '.join(argv)}",
            output=output,
            returncode=process.returncode,
        ) from e

    output = output or ""
    if process.returncode != 0:
        raise MigrationError(
            f"Migration failed with exit code {process.returncode}: {' '.join(argv)}",
            output=output,
            returncode=process.returncode,
        )

    logger.info("Migrations applied in %s", workdir)
    return MigrationResult(command=argv, returncode=process.returncode, output=output)
