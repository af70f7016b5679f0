"""Process collaborator — runs the wrapped command and streams its output.

stdout and stderr are merged into a single stream so lines reach the
dashboard in the order kamal wrote them.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import AsyncIterator, Sequence
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)

# asyncio's default 64 KiB line limit is too small for docker build output.
_LINE_LIMIT = 1024 * 1024

TRUNCATED_SUFFIX = " [line truncated]"
# Bytes of an oversized line that are kept for display.
_TRUNCATED_KEEP = 8192


class ProcessStartError(RuntimeError):
    """Raised when the monitored command cannot be started."""


@runtime_checkable
class LineSource(Protocol):
    """Anything the run loop can pull output lines from."""

    async def start(self) -> None: ...

    def lines(self) -> AsyncIterator[str]: ...

    async def wait(self) -> int: ...

    async def terminate(self, grace: float = 2.0) -> None: ...


def _decode(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace").rstrip("\r\n")


class ProcessLineSource:
    """Spawns ``argv`` and yields its combined output line by line.

    Parameters
    ----------
    argv:
        Executable followed by its arguments.
    cwd:
        Working directory for the child process.
    env:
        Extra environment variables, layered over the current environment.
    """

    def __init__(
        self,
        argv: Sequence[str],
        *,
        cwd: str | os.PathLike[str] | None = None,
        env: dict[str, str] | None = None,
    ) -> None:
        if not argv:
            raise ValueError("argv must name a command to run")
        self.argv = list(argv)
        self.cwd = cwd
        self.env = env
        self._process: asyncio.subprocess.Process | None = None

    @property
    def command_line(self) -> str:
        return " ".join(self.argv)

    @property
    def returncode(self) -> int | None:
        return self._process.returncode if self._process else None

    async def start(self) -> None:
        """Spawn the process.

        Raises
        ------
        ProcessStartError
            If the executable does not exist or cannot be executed.
        """
        env = {**os.environ, **self.env} if self.env else None
        try:
            self._process = await asyncio.create_subprocess_exec(
                *self.argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                stdin=asyncio.subprocess.DEVNULL,
                cwd=self.cwd,
                env=env,
                limit=_LINE_LIMIT,
            )
        except OSError as exc:
            logger.error("Could not start %s: %s", self.command_line, exc)
            raise ProcessStartError(f"{self.argv[0]}: {exc.strerror or exc}") from exc
        logger.info("Started %s (pid %d)", self.command_line, self._process.pid)

    async def lines(self) -> AsyncIterator[str]:
        """Yield decoded output lines until the process closes its output.

        A line longer than the stream limit is cut to its first
        ``_TRUNCATED_KEEP`` bytes and marked with ``TRUNCATED_SUFFIX``; the
        rest of it is discarded and reading carries on with the next line.
        """
        if self._process is None or self._process.stdout is None:
            raise RuntimeError("Process has not been started")
        stdout = self._process.stdout
        head: bytes | None = None
        while True:
            try:
                raw = await stdout.readuntil(b"\n")
            except asyncio.IncompleteReadError as exc:
                # EOF: flush whatever is left of an unterminated last line.
                if head is not None:
                    yield _decode(head) + TRUNCATED_SUFFIX
                elif exc.partial:
                    yield _decode(exc.partial)
                break
            except asyncio.LimitOverrunError as exc:
                chunk = await stdout.read(exc.consumed)
                if head is None:
                    logger.warning("Output line longer than %d bytes, truncating", _LINE_LIMIT)
                    head = chunk[:_TRUNCATED_KEEP]
                continue

            if head is not None:
                yield _decode(head) + TRUNCATED_SUFFIX
                head = None
            else:
                yield _decode(raw)

    async def wait(self) -> int:
        """Wait for the process to exit and return its exit status."""
        if self._process is None:
            raise RuntimeError("Process has not been started")
        returncode = await self._process.wait()
        logger.info("%s exited with status %d", self.command_line, returncode)
        return returncode

    async def terminate(self, grace: float = 2.0) -> None:
        """Ask the process to stop, killing it if it outlives ``grace`` seconds."""
        process = self._process
        if process is None or process.returncode is not None:
            return
        logger.info("Terminating %s", self.command_line)
        try:
            process.terminate()
            try:
                await asyncio.wait_for(process.wait(), timeout=grace)
            except asyncio.TimeoutError:
                logger.warning("%s ignored SIGTERM, killing it", self.command_line)
                process.kill()
                await process.wait()
        except ProcessLookupError:
            # Already gone.
            pass
