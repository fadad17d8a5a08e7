"""Build and normalize markup strings."""

from __future__ import annotations

from typing import Mapping, Sequence

from string_markup.nodes import ChildNode, MarkupTagName, TagAttributes, TagNode, TextNode
from string_markup.options import MarkupFormatOptions
from string_markup.parser import parse_markup

_POSITION_ATTRIBUTES = ("line", "column")


def escape_markup(text: str) -> str:
    """Escape *text* so it parses back as literal text."""
    return text.replace("\\", "\\\\").replace("<", "\\<")


def _quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _attributes(attributes: Mapping[str, str | None]) -> str:
    parts = []
    for key, value in attributes.items():
        parts.append(key if value is None else f"{key}={_quote(value)}")
    return "".join(" " + part for part in parts)


def markup_tag(
    name: MarkupTagName | str,
    text: str = "",
    attributes: Mapping[str, str | None] | None = None,
) -> str:
    """Wrap already-escaped *text* in a tag.

    >>> markup_tag("filelink", "", {"target": "src/index.ts"})
    '<filelink target="src/index.ts" />'
    """
    tag = MarkupTagName(name).value
    attrs = _attributes(attributes or {})
    if not text:
        return f"<{tag}{attrs} />"
    return f"<{tag}{attrs}>{text}</{tag}>"


def serialize_markup(nodes: Sequence[ChildNode]) -> str:
    """Print a tree back to markup."""
    parts: list[str] = []
    for node in nodes:
        if isinstance(node, TextNode):
            parts.append(escape_markup(node.value))
        else:
            parts.append(markup_tag(node.name, serialize_markup(node.children), node.attributes))
    return "".join(parts)


def _normalize(nodes: Sequence[ChildNode], options: MarkupFormatOptions) -> list[ChildNode]:
    result: list[ChildNode] = []
    for node in nodes:
        if isinstance(node, TextNode):
            result.append(node)
            continue

        attributes: TagAttributes = dict(node.attributes)
        if node.name is MarkupTagName.FILELINK:
            target = attributes.get("target")
            if target:
                attributes["target"] = options.normalize_filename(target)
            if options.strip_positions:
                for key in _POSITION_ATTRIBUTES:
                    attributes.pop(key, None)
        result.append(TagNode(node.name, attributes, _normalize(node.children, options), node.position))
    return result


def normalize_markup(markup: str, options: MarkupFormatOptions | None = None) -> str:
    """Parse and re-print *markup* in canonical form.

    ``filelink`` targets go through the filename normalizer, and their
    ``line``/``column`` attributes are dropped when ``strip_positions`` is set.
    """
    options = options or MarkupFormatOptions()
    nodes = parse_markup(markup, max_depth=options.max_depth)
    return serialize_markup(_normalize(nodes, options))
