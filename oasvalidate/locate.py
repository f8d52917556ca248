"""Locating nodes of a composed YAML tree by JSON pointer."""

from __future__ import annotations

import urllib.parse

import yaml


def json_pointer_to_segments(json_path: str) -> list[str]:
    """Split a JSON pointer such as ``#/components/schemas/Pet`` into its keys.

    ``~1`` and ``~0`` escapes are decoded, and a URI-fragment pointer (one that
    starts with ``#``) is percent-decoded. An empty pointer yields no keys.
    """
    if not json_path:
        return []
    path = json_path
    fragment = path.startswith("#")
    if fragment:
        path = path[1:]
    path = path.lstrip("/")
    if not path:
        return []
    segments = []
    for raw in path.split("/"):
        segment = urllib.parse.unquote(raw) if fragment else raw
        segments.append(segment.replace("~1", "/").replace("~0", "~"))
    return segments


def _child(node: yaml.Node, key: str) -> yaml.Node | None:
    if isinstance(node, yaml.MappingNode):
        return next(
            (value for k, value in node.value if isinstance(k, yaml.ScalarNode) and k.value == key),
            None,
        )
    if isinstance(node, yaml.SequenceNode):
        if not key.isdigit():
            return None
        index = int(key)
        return node.value[index] if index < len(node.value) else None
    return None


def locate_schema_property_node(doc: yaml.Node | None, json_path: str) -> yaml.Node | None:
    """Return the node of ``doc`` that ``json_path`` points at, or ``None`` if there is none."""
    if doc is None:
        return None
    segments = json_pointer_to_segments(json_path)
    if not segments:
        return None
    node: yaml.Node | None = doc
    for segment in segments:
        node = _child(node, segment)
        if node is None:
            return None
    return node


def node_line_and_column(node: yaml.Node) -> tuple[int, int]:
    """Return the 1-based line and column a reader would point to for ``node``.

    For a map or a list this is the line of the key that holds it, one above
    where its content starts.
    """
    line = node.start_mark.line + 1
    column = node.start_mark.column + 1
    if isinstance(node, (yaml.MappingNode, yaml.SequenceNode)) and line > 0:
        line -= 1
    return line, column