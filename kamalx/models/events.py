"""Semantic event models — the classified form of one line of kamal output."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class Color(str, Enum):
    """Foreground colors the dashboard knows how to draw."""

    NONE = "none"
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
    WHITE = "white"


class EventKind(str, Enum):
    """Tag for the shape of line a ``SemanticEvent`` was classified from."""

    STAGE = "stage"
    COMMAND_STARTED = "command_started"
    COMMAND_FINISHED = "command_finished"
    DEBUG = "debug"
    INFO = "info"
    RAW = "raw"


class Style(BaseModel):
    """Color and weight applied to exactly one segment of text."""

    model_config = ConfigDict(frozen=True)

    color: Color = Color.NONE
    bold: bool = False

    @property
    def rich_style(self) -> str:
        """The equivalent Rich style string (empty for an unstyled segment)."""
        parts: list[str] = []
        if self.bold:
            parts.append("bold")
        if self.color != Color.NONE:
            parts.append(self.color.value)
        return " ".join(parts)


class StyledSegment(BaseModel):
    """A styled run of text within one classified line."""

    model_config = ConfigDict(frozen=True)

    text: str
    style: Style = Style()

    @classmethod
    def plain(cls, text: str, color: Color = Color.NONE) -> StyledSegment:
        return cls(text=text, style=Style(color=color))

    @classmethod
    def bold(cls, text: str, color: Color = Color.NONE) -> StyledSegment:
        return cls(text=text, style=Style(color=color, bold=True))


class SemanticEvent(BaseModel):
    """The parsed form of one input line.

    ``color`` is the line's outer color.  Every segment carries its own
    resolved style, so renderers never need to look at ``color`` to draw
    the line; it is kept for routing and inspection.
    """

    model_config = ConfigDict(frozen=True)

    kind: EventKind
    segments: tuple[StyledSegment, ...]
    color: Color = Color.WHITE

    @property
    def text(self) -> str:
        """Concatenation of all segment texts, in order."""
        return "".join(segment.text for segment in self.segments)
