"""Markup styles that turn colored transcript lines into a tagged string.

The engine only knows :class:`~zest.status.LineColor`. A :class:`Markup`
decides how each color is tagged and what separates lines, so the same
transcript can be shown as in-engine rich text, HTML or a terminal.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from zest.status import Line, LineColor


@dataclass(frozen=True)
class Markup:
    """A tagging style.

    Attributes:
        name: Short identifier, e.g. ``"horizon"``.
        line_break: Separator placed between lines.
        open_tags: Opening tag per color; colors without an entry are untagged.
        close_tag: Tag closing any opened color span.
    """
    name: str
    line_break: str
    open_tags: Mapping[LineColor, str] = field(default_factory=dict)
    close_tag: str = ""

    def wrap(self, text: str, color: LineColor) -> str:
        """Wrap ``text`` in the tags for ``color``. Empty text stays empty."""
        if not text:
            return ""
        open_tag = self.open_tags.get(color)
        if open_tag is None:
            return text
        return f"{open_tag}{text}{self.close_tag}"


HORIZON_MARKUP = Markup(
    name="horizon",
    line_break="<br>",
    open_tags={
        LineColor.RED: "<color=#f66>",
        LineColor.GREEN: "<color=#6f6>",
        LineColor.YELLOW: "<color=#ff0>",
        LineColor.GREY: "<color=#ccc>",
    },
    close_tag="</color>",
)

HTML_MARKUP = Markup(
    name="html",
    line_break="<br>",
    open_tags={
        LineColor.RED: '<span style="color:#f66">',
        LineColor.GREEN: '<span style="color:#6f6">',
        LineColor.YELLOW: '<span style="color:#ff0">',
        LineColor.GREY: '<span style="color:#ccc">',
    },
    close_tag="</span>",
)

ANSI_MARKUP = Markup(
    name="ansi",
    line_break="\n",
    open_tags={
        LineColor.RED: "\033[31m",
        LineColor.GREEN: "\033[32m",
        LineColor.YELLOW: "\033[33m",
        LineColor.GREY: "\033[90m",
    },
    close_tag="\033[0m",
)

PLAIN_MARKUP = Markup(name="plain", line_break="\n")

MARKUPS: dict[str, Markup] = {
    m.name: m for m in (HORIZON_MARKUP, HTML_MARKUP, ANSI_MARKUP, PLAIN_MARKUP)
}


def render_lines(lines: Iterable[Line], markup: Markup = HORIZON_MARKUP) -> str:
    """Render lines into one tagged string.

    Consecutive lines of the same color share a single span, so a run of
    green pairings produces one opening and one closing tag.
    """
    parts: list[str] = []
    current_color = LineColor.DEFAULT
    run = ""
    first = True

    for line in lines:
        text = line.text if first else markup.line_break + line.text
        first = False
        if line.color == current_color:
            run += text
        else:
            parts.append(markup.wrap(run, current_color))
            run = text
            current_color = line.color

    parts.append(markup.wrap(run, current_color))
    return "".join(parts)
