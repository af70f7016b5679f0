"""RunLoop — glues the process, the blink timer and the terminal together.

One consumer task owns the terminal surface.  Producers never draw; they
post messages to a single channel:

- the line pump posts ``LineReceived`` for every output line and one
  ``Terminated`` when the process exits (or fails to start)
- the ticker posts ``Tick`` every ``blink_interval`` seconds so the
  progress cursor keeps blinking while kamal is quiet

Draws are therefore serialized without locks, in arrival order.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Union

from kamalx.core.state import DashboardState
from kamalx.models.events import Color
from kamalx.models.geometry import compute_geometry
from kamalx.monitor.surface import TerminalSurface
from kamalx.runner.process import LineSource, ProcessStartError

logger = logging.getLogger(__name__)

FINISHED_MESSAGE = "Kamal finished."
EXIT_HINT = " Press 'ctrl+c' to exit."
INTERRUPTED_EXIT_CODE = 130


@dataclass(frozen=True)
class LineReceived:
    text: str


@dataclass(frozen=True)
class Tick:
    pass


@dataclass(frozen=True)
class Terminated:
    returncode: int | None
    error: str | None = None


Message = Union[LineReceived, Tick, Terminated]


class RunLoop:
    """Drives one monitored run from first line to teardown.

    Parameters
    ----------
    state:
        The run's classifier, tracker and renderer.
    surface:
        Where the composed dashboard is shown.
    blink_interval:
        Seconds between progress redraws while no output arrives.
    hold_on_finish:
        Keep the dashboard up after the process exits until
        ``request_stop`` is called (Ctrl+C).
    shutdown_grace:
        Seconds the process gets to exit after a stop request before it
        is killed.
    """

    def __init__(
        self,
        state: DashboardState,
        surface: TerminalSurface,
        *,
        blink_interval: float = 0.5,
        hold_on_finish: bool = True,
        shutdown_grace: float = 2.0,
    ) -> None:
        self.state = state
        self.surface = surface
        self.blink_interval = blink_interval
        self.hold_on_finish = hold_on_finish
        self.shutdown_grace = shutdown_grace
        self.interrupted = False
        self._channel: asyncio.Queue[Message] | None = None
        self._stop: asyncio.Event | None = None
        self._source: LineSource | None = None
        self._ticker: asyncio.Task[None] | None = None
        self._background: set[asyncio.Task[None]] = set()

    # ------------------------------------------------------------------
    # Collaborator callbacks
    # ------------------------------------------------------------------

    def on_line(self, text: str) -> None:
        """Queue one line of process output for classification and drawing."""
        self._post(LineReceived(text))

    def on_terminate(self, returncode: int | None, error: str | None = None) -> None:
        """Queue the end of the monitored process."""
        self._post(Terminated(returncode, error))

    def request_stop(self) -> None:
        """Stop the run: terminate the process and release the dashboard."""
        if self._stop is None or self._stop.is_set():
            return
        logger.info("Stop requested")
        # Closing a held dashboard after the process exited is not an interrupt.
        self.interrupted = not self.state.finished
        self._stop.set()
        if self._source is not None and not self.state.finished:
            task = asyncio.get_running_loop().create_task(
                self._source.terminate(self.shutdown_grace)
            )
            self._background.add(task)
            task.add_done_callback(self._background.discard)

    def _post(self, message: Message) -> None:
        if self._channel is None:
            raise RuntimeError("RunLoop is not running")
        self._channel.put_nowait(message)

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    async def run(self, source: LineSource) -> int:
        """Monitor ``source`` until it terminates; return its exit code."""
        self._channel = asyncio.Queue()
        self._stop = asyncio.Event()
        self._source = source

        self.state.draw_progress()
        self._refresh()

        pump = asyncio.create_task(self._pump(source))
        self._ticker = asyncio.create_task(self._tick())
        try:
            returncode = await self._consume()
        finally:
            await self._cancel_ticker()
            if not pump.done():
                pump.cancel()
            await asyncio.gather(pump, return_exceptions=True)

        if self.hold_on_finish and not self._stop.is_set():
            await self._stop.wait()
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

        if self.interrupted:
            return INTERRUPTED_EXIT_CODE
        return returncode

    async def _pump(self, source: LineSource) -> None:
        try:
            await source.start()
        except ProcessStartError as exc:
            self.on_terminate(None, error=str(exc))
            return
        try:
            async for line in source.lines():
                self.on_line(line)
        except OSError as exc:
            logger.exception("Lost the output stream")
            await source.terminate(self.shutdown_grace)
            self.on_terminate(None, error=f"lost the output stream ({exc})")
            return
        self.on_terminate(await source.wait())

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(self.blink_interval)
            self._post(Tick())

    async def _cancel_ticker(self) -> None:
        if self._ticker is None:
            return
        self._ticker.cancel()
        await asyncio.gather(self._ticker, return_exceptions=True)
        self._ticker = None

    async def _consume(self) -> int:
        assert self._channel is not None
        while True:
            message = await self._channel.get()

            if isinstance(message, LineReceived):
                before = self.state.tracker.current_index
                self.state.ingest(message.text)
                if self.state.tracker.current_index != before:
                    self.state.draw_progress(toggle_blink=False)
                self._refresh()

            elif isinstance(message, Tick):
                self._resize_if_needed()
                self.state.draw_progress()
                self._refresh()

            else:
                await self._cancel_ticker()
                return self._finish(message)

    def _finish(self, message: Terminated) -> int:
        self.state.finish()
        renderer = self.state.renderer

        if message.error is not None:
            logger.error("Command failed: %s", message.error)
            renderer.show_status(f"Command failed: {message.error}", Color.RED)
            returncode = 1
        else:
            returncode = message.returncode if message.returncode is not None else 1
            if returncode < 0:
                # Killed by signal N.
                returncode = 128 - returncode
            if returncode != 0:
                renderer.show_status(f"Command exited with status {returncode}", Color.RED)

        hint = EXIT_HINT if self.hold_on_finish and not self.interrupted else ""
        renderer.show_status(f"{FINISHED_MESSAGE}{hint}", Color.RED)
        self._refresh()
        return returncode

    # ------------------------------------------------------------------
    # Surface
    # ------------------------------------------------------------------

    def _refresh(self) -> None:
        self.surface.update(self.state.renderer.render())

    def _resize_if_needed(self) -> None:
        renderer = self.state.renderer
        width, height = self.surface.size
        geometry = compute_geometry(
            width,
            height,
            progress_height=renderer.geometry.progress.height,
            spacer_height=renderer.geometry.spacer_height,
        )
        if geometry != renderer.geometry:
            logger.debug("Terminal resized to %dx%d", width, height)
            renderer.resize(geometry)
