"""Subprocess helpers"""

import logging
import subprocess
from pathlib import Path
from typing import Optional, Sequence, Mapping

from ..models.result import CommandResult

logger = logging.getLogger("process")

# Shell convention for "command not found"
COMMAND_NOT_FOUND = 127


def run_command(argv: Sequence[str],
                cwd: Path,
                env: Optional[Mapping[str, str]] = None) -> CommandResult:
    """
    Run a command to completion and capture its output

    Spawn failures are folded into the result instead of raised, so
    callers only ever inspect the return code.

    Args:
        argv: Command and arguments
        cwd: Working directory
        env: Optional environment

    Returns:
        CommandResult with captured stdout and stderr
    """
    argv = tuple(str(a) for a in argv)
    logger.debug(f"Running `{' '.join(argv)}` in {cwd}")

    try:
        completed = subprocess.run(
            argv,
            cwd=cwd,
            env=dict(env) if env is not None else None,
            capture_output=True,
            text=True
        )
    except FileNotFoundError as e:
        return CommandResult(
            argv=argv,
            cwd=Path(cwd),
            returncode=COMMAND_NOT_FOUND,
            stderr=f"Failed to run `{argv[0]}`: {e}"
        )
    except OSError as e:
        return CommandResult(
            argv=argv,
            cwd=Path(cwd),
            returncode=1,
            stderr=f"Failed to run `{argv[0]}`: {e}"
        )

    return CommandResult(
        argv=argv,
        cwd=Path(cwd),
        returncode=completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or ""
    )
