"""Async subprocess helper shared by the git and HTTP collaborators."""

import asyncio
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Exit statuses a shell reports for a missing or unrunnable executable
COMMAND_NOT_FOUND = 127
COMMAND_NOT_EXECUTABLE = 126


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external command."""
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


async def run_command(*argv: str, input_text: str | None = None) -> CommandResult:
    """Run a command without blocking the event loop and capture its output."""
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.PIPE if input_text is not None else asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError:
        return CommandResult(COMMAND_NOT_FOUND, "", f"{argv[0]} is not installed or not in PATH")
    except OSError as e:
        return CommandResult(COMMAND_NOT_EXECUTABLE, "", f"{argv[0]} could not be run: {e}")

    data = input_text.encode('utf-8') if input_text is not None else None
    stdout, stderr = await proc.communicate(data)
    result = CommandResult(
        returncode=proc.returncode if proc.returncode is not None else 1,
        stdout=stdout.decode('utf-8', errors='replace'),
        stderr=stderr.decode('utf-8', errors='replace'),
    )
    logger.debug("%s exited with %d", argv[0], result.returncode)
    return result
