"""Grid layout: turns a markup tree into lines of styled segments.

Layout runs in two passes.  Inline content is first collected into a flat
stream of styled segments, hard breaks and pre-rendered blocks (tables,
lists, rules); the stream is then wrapped greedily at spaces to the column
budget.  Tables measure every cell without wrapping first, take the widest
cell per column, shrink columns proportionally when they do not fit, and
re-render only the cells that no longer fit.

Styles travel down the tree inside an immutable :class:`_Context`, so a
sibling never sees the style of another.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from typing import Callable, Sequence, Union

from string_markup.errors import DepthExceededError, InvalidAttributeError, MarkupDiagnostic
from string_markup.nodes import ChildNode, MarkupTagName, TagNode, TextNode, is_blank
from string_markup.options import MarkupFormatOptions
from string_markup.styles import PLAIN, ResolvedStyle, read_int, resolve_content, resolve_style
from string_markup.tokenizer import Position
from string_markup.utils import grapheme_width, split_graphemes, visible_width

logger = logging.getLogger(__name__)

COLUMN_GAP = 1
MIN_COLUMN_WIDTH = 3
DEFAULT_PAD_WIDTH = 1
HR_CHAR = "─"
BULLET = "-"

_SPACES_RE = re.compile(r"( +)")


@dataclass(frozen=True)
class Segment:
    """A run of text drawn with one style."""

    text: str
    style: ResolvedStyle = PLAIN
    nobr: bool = False

    @property
    def width(self) -> int:
        return visible_width(self.text)


Line = list[Segment]


def line_width(line: Sequence[Segment]) -> int:
    return sum(seg.width for seg in line)


class _HardBreak:
    def __repr__(self) -> str:
        return "<break>"


_BREAK = _HardBreak()


@dataclass
class _Block:
    lines: list[Line]


_Item = Union[Segment, _HardBreak, _Block]


@dataclass(frozen=True)
class _Context:
    style: ResolvedStyle = PLAIN
    width: int | None = None  # None: no wrapping
    nobr: bool = False
    depth: int = 0
    degraded: bool = False  # inside a malformed structure, already reported


class GridRenderer:
    """Lay out a markup tree for a fixed column budget."""

    def __init__(self, options: MarkupFormatOptions) -> None:
        self.options = options
        self.diagnostics: list[MarkupDiagnostic] = []
        self._handlers: dict[MarkupTagName, Callable[[TagNode, _Context], list[_Item]]] = {
            MarkupTagName.TOKEN: self._inline,
            MarkupTagName.HR: self._hr,
            MarkupTagName.PAD: self._pad,
            MarkupTagName.GRAMMAR_NUMBER: self._inline,
            MarkupTagName.COMMAND: self._inline,
            MarkupTagName.INVERSE: self._inline,
            MarkupTagName.DIM: self._inline,
            MarkupTagName.EMPHASIS: self._inline,
            MarkupTagName.NUMBER: self._inline,
            MarkupTagName.HYPERLINK: self._inline,
            MarkupTagName.FILELINK: self._inline,
            MarkupTagName.DURATION: self._inline,
            MarkupTagName.FILESIZE: self._inline,
            MarkupTagName.ITALIC: self._inline,
            MarkupTagName.UNDERLINE: self._inline,
            MarkupTagName.STRIKE: self._inline,
            MarkupTagName.ERROR: self._inline,
            MarkupTagName.SUCCESS: self._inline,
            MarkupTagName.WARN: self._inline,
            MarkupTagName.INFO: self._inline,
            MarkupTagName.HIGHLIGHT: self._inline,
            MarkupTagName.COLOR: self._inline,
            MarkupTagName.TABLE: self._table,
            MarkupTagName.TR: self._misplaced,
            MarkupTagName.TD: self._misplaced,
            MarkupTagName.NOBR: self._nobr,
            MarkupTagName.OL: self._list,
            MarkupTagName.UL: self._list,
            MarkupTagName.LI: self._misplaced,
        }

    def render(self, nodes: Sequence[ChildNode]) -> list[Line]:
        return self._flow(nodes, _Context(width=self.options.columns))

    # -- diagnostics ---------------------------------------------------------

    def _report(self, message: str, position: Position | None) -> None:
        self.diagnostics.append(MarkupDiagnostic(message, position))
        logger.warning("%s", message)

    # -- collection ----------------------------------------------------------

    def _flow(self, children: Sequence[ChildNode], ctx: _Context) -> list[Line]:
        return self._layout(self._collect(children, ctx), ctx)

    def _collect(self, children: Sequence[ChildNode], ctx: _Context) -> list[_Item]:
        items: list[_Item] = []
        for child in children:
            if isinstance(child, TextNode):
                items.extend(self._text(child.value, ctx))
            else:
                inner = self._enter(child, ctx)
                items.extend(self._handlers[child.name](child, inner))
        return items

    def _enter(self, node: TagNode, ctx: _Context) -> _Context:
        depth = ctx.depth + 1
        if depth > self.options.max_depth:
            raise DepthExceededError(
                f"Markup nested deeper than {self.options.max_depth} tags", node.position
            )
        return replace(ctx, style=resolve_style(node, ctx.style, self.options), depth=depth)

    def _text(self, text: str, ctx: _Context) -> list[_Item]:
        items: list[_Item] = []
        for i, part in enumerate(text.split("\n")):
            if i:
                items.append(_BREAK)
            if part:
                items.append(Segment(part, ctx.style, ctx.nobr))
        return items

    # -- tag handlers --------------------------------------------------------

    def _inline(self, node: TagNode, ctx: _Context) -> list[_Item]:
        content = resolve_content(node, self.options)
        if content is not None:
            return self._text(content, ctx)
        return self._collect(node.children, ctx)

    def _nobr(self, node: TagNode, ctx: _Context) -> list[_Item]:
        return self._collect(node.children, replace(ctx, nobr=True))

    def _misplaced(self, node: TagNode, ctx: _Context) -> list[_Item]:
        if not ctx.degraded:
            parent = {MarkupTagName.TR: "table", MarkupTagName.TD: "tr"}.get(node.name, "ol> or <ul")
            self._report(f"<{node.name.value}> used outside of <{parent}>", node.position)
        return self._collect(node.children, ctx)

    def _pad(self, node: TagNode, ctx: _Context) -> list[_Item]:
        width = read_int(node, "width", DEFAULT_PAD_WIDTH)
        align = node.get("align") or "left"
        if align not in ("left", "right"):
            raise InvalidAttributeError(f"Unknown <pad> alignment {align!r}", node.position)

        content = [
            replace(item, nobr=True)
            for item in self._collect(node.children, ctx)
            if isinstance(item, Segment)
        ]
        fill = width - line_width(content)
        if fill <= 0:
            return list(content)
        spacer = Segment(" " * fill, PLAIN, nobr=True)
        return [spacer, *content] if align == "right" else [*content, spacer]

    def _hr(self, node: TagNode, ctx: _Context) -> list[_Item]:
        width = ctx.width if ctx.width is not None else self.options.columns
        label: Line = [item for item in self._collect(node.children, ctx) if isinstance(item, Segment)]
        if not label:
            return [_Block([[Segment(HR_CHAR * width, ctx.style)]])]

        # the rule starts after the last line of the label
        lines = [label] if ctx.nobr else wrap_segments(label, max(1, width - 1))
        line = lines[-1]
        if line_width(line) < width:
            line.append(Segment(" ", ctx.style))
        rule = max(0, width - line_width(line))
        if rule:
            line.append(Segment(HR_CHAR * rule, ctx.style))
        return [_Block(lines)]

    def _list(self, node: TagNode, ctx: _Context) -> list[_Item]:
        ordered = node.name is MarkupTagName.OL
        entries: list[ChildNode] = []
        item_count = 0
        for child in node.children:
            if is_blank(child):
                continue
            if isinstance(child, TagNode) and child.name is MarkupTagName.LI:
                item_count += 1
            elif not ctx.degraded:
                self._report(f"<{node.name.value}> may only contain <li> items", node.position)
            entries.append(child)

        if ordered:
            start = read_int(node, "start", 1)
            number_width = max((len(f"{n}.") for n in range(start, start + item_count)), default=2)
            markers = [f"{n}.".rjust(number_width) + " " for n in range(start, start + item_count)]
        else:
            markers = [BULLET + " "] * item_count

        marker_width = visible_width(markers[0]) if markers else 0
        content_width = None if ctx.width is None else max(1, ctx.width - marker_width)
        indent = " " * marker_width

        lines: list[Line] = []
        marker_iter = iter(markers)
        for entry in entries:
            if not (isinstance(entry, TagNode) and entry.name is MarkupTagName.LI):
                lines.extend(self._flow([entry], replace(ctx, degraded=True)))
                continue

            inner = self._enter(entry, ctx)
            body = self._flow(entry.children, replace(inner, width=content_width)) or [[]]
            lines.append([Segment(next(marker_iter), ctx.style), *body[0]])
            for body_line in body[1:]:
                lines.append([Segment(indent), *body_line] if body_line else [])
        return [_Block(lines)]

    def _table(self, node: TagNode, ctx: _Context) -> list[_Item]:
        rows: list[list[TagNode]] = []
        row_nodes: list[TagNode] = []
        malformed = False
        for child in node.children:
            if is_blank(child):
                continue
            if not (isinstance(child, TagNode) and child.name is MarkupTagName.TR):
                malformed = True
                break
            cells: list[TagNode] = []
            for cell in child.children:
                if is_blank(cell):
                    continue
                if not (isinstance(cell, TagNode) and cell.name is MarkupTagName.TD):
                    malformed = True
                    break
                cells.append(cell)
            row_nodes.append(child)
            rows.append(cells)

        if malformed:
            if not ctx.degraded:
                self._report("<table> may only contain <tr> rows of <td> cells", node.position)
            return self._collect(node.children, replace(ctx, degraded=True))

        num_cols = max((len(cells) for cells in rows), default=0)
        if num_cols == 0:
            return [_Block([])]

        # first pass: natural widths
        cell_contexts: list[list[_Context]] = []
        natural_lines: list[list[list[Line]]] = []
        natural = [0] * num_cols
        for row, cells in zip(row_nodes, rows):
            row_ctx = self._enter(row, ctx)
            contexts = [self._enter(cell, row_ctx) for cell in cells]
            rendered = [
                self._flow(cell.children, replace(cctx, width=None))
                for cell, cctx in zip(cells, contexts)
            ]
            for col, cell_lines in enumerate(rendered):
                natural[col] = max(natural[col], max((line_width(l) for l in cell_lines), default=0))
            cell_contexts.append(contexts)
            natural_lines.append(rendered)

        gap = COLUMN_GAP
        if ctx.width is None or ctx.nobr:
            widths = natural
        else:
            if num_cols + gap * (num_cols - 1) > ctx.width:
                gap = 0
            if num_cols > ctx.width:
                return [_Block(self._stacked(rows, cell_contexts, ctx.width))]
            widths = fit_columns(natural, ctx.width - gap * (num_cols - 1))

        # second pass: emit rows
        lines: list[Line] = []
        for cells, contexts, rendered in zip(rows, cell_contexts, natural_lines):
            wrapped: list[list[Line]] = []
            for col, (cell, cctx) in enumerate(zip(cells, contexts)):
                if natural[col] <= widths[col]:
                    wrapped.append(rendered[col])
                else:
                    wrapped.append(
                        self._flow(cell.children, replace(cctx, width=widths[col], degraded=True))
                    )
            aligns = [cell.get("align") or "left" for cell in cells]

            height = max((len(cell_lines) for cell_lines in wrapped), default=0) or 1
            for index in range(height):
                line: Line = []
                for col, cell_lines in enumerate(wrapped):
                    if col and gap:
                        line.append(Segment(" " * gap))
                    content = cell_lines[index] if index < len(cell_lines) else []
                    fill = widths[col] - line_width(content)
                    align = aligns[col]
                    last = col == len(wrapped) - 1
                    if fill > 0 and align == "right":
                        line.append(Segment(" " * fill))
                        line.extend(content)
                    else:
                        line.extend(content)
                        if fill > 0 and not last:
                            line.append(Segment(" " * fill))
                lines.append(line)
        return [_Block(lines)]

    def _stacked(
        self, rows: list[list[TagNode]], cell_contexts: list[list[_Context]], width: int
    ) -> list[Line]:
        """Lay every cell out on its own lines when the columns cannot sit side by side."""
        lines: list[Line] = []
        for cells, contexts in zip(rows, cell_contexts):
            for cell, cctx in zip(cells, contexts):
                lines.extend(self._flow(cell.children, replace(cctx, width=width, degraded=True)))
        return lines

    # -- layout --------------------------------------------------------------

    def _layout(self, items: list[_Item], ctx: _Context) -> list[Line]:
        chunks: list[list[_Item] | _Block] = []
        paragraph: list[_Item] = []
        for item in items:
            if isinstance(item, _Block):
                chunks.append(paragraph)
                chunks.append(item)
                paragraph = []
            else:
                paragraph.append(item)
        chunks.append(paragraph)

        lines: list[Line] = []
        for i, chunk in enumerate(chunks):
            if isinstance(chunk, _Block):
                lines.extend(chunk.lines)
                continue
            after_block = i > 0 and isinstance(chunks[i - 1], _Block)
            before_block = i + 1 < len(chunks) and isinstance(chunks[i + 1], _Block)
            if after_block and chunk and chunk[0] is _BREAK:
                chunk = chunk[1:]
            if before_block and chunk and chunk[-1] is _BREAK:
                chunk = chunk[:-1]
            if not chunk:
                continue
            if (after_block or before_block) and all(
                isinstance(item, Segment) and not item.text.strip() for item in chunk
            ):
                continue
            lines.extend(self._wrap(chunk, ctx.width))
        return lines

    def _wrap(self, items: list[_Item], width: int | None) -> list[Line]:
        physical: list[list[Segment]] = [[]]
        for item in items:
            if item is _BREAK:
                physical.append([])
            elif isinstance(item, Segment):
                physical[-1].append(item)

        lines: list[Line] = []
        for segments in physical:
            if width is None:
                lines.append(segments)
            else:
                lines.extend(wrap_segments(segments, max(1, width)))
        return lines


# ---------------------------------------------------------------------------
# Wrapping
# ---------------------------------------------------------------------------


def _split_words(segments: list[Segment]) -> list[Segment | list[Segment]]:
    """Split into space segments and words (lists of fragments).

    A word may span several segments; ``nobr`` segments never split.
    """
    tokens: list[Segment | list[Segment]] = []
    word: list[Segment] = []
    for seg in segments:
        if seg.nobr:
            word.append(seg)
            continue
        for piece in _SPACES_RE.split(seg.text):
            if not piece:
                continue
            if piece[0] == " ":
                if word:
                    tokens.append(word)
                    word = []
                tokens.append(Segment(piece, seg.style))
            else:
                word.append(Segment(piece, seg.style))
    if word:
        tokens.append(word)
    return tokens


def wrap_segments(segments: list[Segment], width: int) -> list[Line]:
    """Greedily wrap one physical line of segments to *width* cells.

    Spaces at a wrap point are dropped.  Words wider than *width* are split
    at grapheme boundaries unless they contain ``nobr`` text, which is
    allowed to overflow.
    """
    lines: list[Line] = []
    line: Line = []
    used = 0
    pending: list[Segment] = []
    wrapped = False

    for token in _split_words(segments):
        if isinstance(token, Segment):
            if line or not wrapped:
                pending.append(token)
            continue

        word_width = line_width(token)
        pending_width = line_width(pending)
        if used + pending_width + word_width <= width:
            line.extend(pending)
            line.extend(token)
            used += pending_width + word_width
            pending = []
            continue

        if line and used > 0:
            lines.append(line)
            line, used, wrapped = [], 0, True
        elif used + pending_width < width:
            line.extend(pending)
            used += pending_width
        pending = []

        if used + word_width <= width or any(seg.nobr for seg in token):
            line.extend(token)
            used += word_width
            continue

        for seg in token:
            buffer: list[str] = []
            for g in split_graphemes(seg.text):
                gw = grapheme_width(g)
                if used + gw > width and used > 0:
                    if buffer:
                        line.append(Segment("".join(buffer), seg.style))
                        buffer = []
                    lines.append(line)
                    line, used, wrapped = [], 0, True
                buffer.append(g)
                used += gw
            if buffer:
                line.append(Segment("".join(buffer), seg.style))

    if used + line_width(pending) <= width:
        line.extend(pending)
    lines.append(line)
    return lines


def fit_columns(natural: list[int], budget: int) -> list[int]:
    """Shrink natural column widths proportionally to fit *budget* cells."""
    total = sum(natural)
    if total <= budget:
        return list(natural)

    num_cols = len(natural)
    min_width = MIN_COLUMN_WIDTH if num_cols * MIN_COLUMN_WIDTH <= budget else 1
    budget = max(budget, num_cols * min_width)

    widths = [max(min(n, min_width), n * budget // total) for n in natural]

    # columns raised to the minimum are paid for by the widest ones
    excess = sum(widths) - budget
    while excess > 0:
        widest = max(range(num_cols), key=lambda c: widths[c])
        if widths[widest] <= min_width:
            break
        widths[widest] -= 1
        excess -= 1

    remaining = budget - sum(widths)
    col = 0
    while remaining > 0 and any(w < n for w, n in zip(widths, natural)):
        if widths[col] < natural[col]:
            widths[col] += 1
            remaining -= 1
        col = (col + 1) % num_cols
    return widths
