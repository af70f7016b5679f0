"""Line classification — turns raw kamal output into ``SemanticEvent``s.

Kamal prints a handful of recognisable line shapes (stage banners, SSHKit
``INFO``/``DEBUG`` records for remote commands, plain ``INFO`` messages).
``LineClassifier`` tries an ordered list of ``(matcher, builder)`` rules and
the first match wins.  Precedence matters: a ``Running``/``Finished`` record
also matches the generic ``INFO`` rule, so the specific rules come first.

Classification is total: a line no rule recognises becomes a ``RAW`` event
holding the line verbatim.
"""

from __future__ import annotations

import logging
import re
from typing import Callable

from kamalx.models.events import Color, EventKind, SemanticEvent, StyledSegment

logger = logging.getLogger(__name__)

DEFAULT_HOSTNAME = "localhost"

# Command ids are ASCII word characters.  Keep every pattern linear in the
# line length: a single leading ``\w`` in the stage banner, not ``\w+.+``.
STAGE_PATTERN = re.compile(r"(\w.+)\.{3}", re.ASCII)
COMMAND_STARTED_PATTERN = re.compile(r"INFO \[(\w+)\] Running (.+) on (.+)", re.ASCII)
COMMAND_FINISHED_PATTERN = re.compile(
    r"INFO \[(\w+)\] Finished in ([\d.]+) seconds with exit status (\d+)", re.ASCII
)
DEBUG_PATTERN = re.compile(r"DEBUG \[(\w+)\] (.+)", re.ASCII)
INFO_PATTERN = re.compile(r"INFO (.+)")

Matcher = Callable[[str], "re.Match[str] | None"]
Builder = Callable[["re.Match[str]"], SemanticEvent]


class HostnameRegistry:
    """Maps command ids to the host their command runs on.

    Entries are only ever added (on ``Running ... on <host>`` records) and
    live as long as the owning classifier, i.e. one monitored run.
    """

    def __init__(self) -> None:
        self._hosts: dict[str, str] = {}

    def register(self, command_id: str, hostname: str) -> None:
        self._hosts[command_id] = hostname

    def resolve(self, command_id: str) -> str:
        """Hostname for ``command_id``.

        Falls back to the first hostname ever registered, then to
        ``localhost`` when nothing has been registered at all.
        """
        if command_id in self._hosts:
            return self._hosts[command_id]
        for hostname in self._hosts.values():
            return hostname
        return DEFAULT_HOSTNAME

    def __contains__(self, command_id: object) -> bool:
        return command_id in self._hosts

    def __len__(self) -> int:
        return len(self._hosts)


def _command_label(command_id: str, hostname: str, color: Color) -> StyledSegment:
    return StyledSegment.bold(f"Command[{command_id}@{hostname}]", color)


class LineClassifier:
    """Classifies one line of kamal output at a time.

    Parameters
    ----------
    registry:
        Hostname registry to record command hosts in.  A fresh one is
        created if not provided.
    """

    def __init__(self, registry: HostnameRegistry | None = None) -> None:
        self.registry = registry if registry is not None else HostnameRegistry()
        self._rules: list[tuple[Matcher, Builder]] = [
            (lambda line: STAGE_PATTERN.fullmatch(line.strip()), self._stage),
            (COMMAND_STARTED_PATTERN.search, self._command_started),
            (COMMAND_FINISHED_PATTERN.search, self._command_finished),
            (DEBUG_PATTERN.search, self._debug),
            (INFO_PATTERN.search, self._info),
        ]

    def classify(self, line: str) -> SemanticEvent:
        """Return the ``SemanticEvent`` for ``line``.  Never raises."""
        for matcher, builder in self._rules:
            match = matcher(line)
            if match is not None:
                return builder(match)
        return SemanticEvent(
            kind=EventKind.RAW,
            segments=(StyledSegment.plain(line, Color.WHITE),),
            color=Color.WHITE,
        )

    # ------------------------------------------------------------------
    # Builders
    # ------------------------------------------------------------------

    def _stage(self, match: re.Match[str]) -> SemanticEvent:
        color = Color.WHITE
        return SemanticEvent(
            kind=EventKind.STAGE,
            segments=(
                StyledSegment.bold("Stage:", color),
                StyledSegment.plain(f" {match.group(1)}", color),
            ),
            color=color,
        )

    def _command_started(self, match: re.Match[str]) -> SemanticEvent:
        command_id, command, hostname = match.groups()
        self.registry.register(command_id, hostname)
        logger.debug("Command %s started on %s", command_id, hostname)

        color = Color.GREEN
        return SemanticEvent(
            kind=EventKind.COMMAND_STARTED,
            segments=(
                _command_label(command_id, hostname, color),
                StyledSegment.plain(f" {command}", color),
            ),
            color=color,
        )

    def _command_finished(self, match: re.Match[str]) -> SemanticEvent:
        command_id, _seconds, status = match.groups()
        hostname = self.registry.resolve(command_id)
        status_color = Color.GREEN if int(status) == 0 else Color.RED

        color = Color.YELLOW
        return SemanticEvent(
            kind=EventKind.COMMAND_FINISHED,
            segments=(
                _command_label(command_id, hostname, color),
                StyledSegment.plain(" Returned Status: ", color),
                StyledSegment.plain(status, status_color),
            ),
            color=color,
        )

    def _debug(self, match: re.Match[str]) -> SemanticEvent:
        # Debug records are never attributed to a remote host.
        command_id, message = match.groups()
        color = Color.YELLOW
        return SemanticEvent(
            kind=EventKind.DEBUG,
            segments=(
                _command_label(command_id, DEFAULT_HOSTNAME, color),
                StyledSegment.plain(f" {message}", color),
            ),
            color=color,
        )

    def _info(self, match: re.Match[str]) -> SemanticEvent:
        color = Color.BLUE
        return SemanticEvent(
            kind=EventKind.INFO,
            segments=(
                StyledSegment.bold("Info:", color),
                StyledSegment.plain(f" {match.group(1)}", color),
            ),
            color=color,
        )
