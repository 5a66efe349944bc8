# Contains the typed document tree consumed by the conversion passes
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple

from .errors import TreeContractError


class NodeKind(Enum):
    OBJECT = "object"
    ARRAY = "array"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"


SCALAR_KINDS = frozenset({NodeKind.STRING, NodeKind.NUMBER, NodeKind.BOOLEAN, NodeKind.NULL})


@dataclass
class Node:
    """
    A single node of the document tree.

    Objects keep their (key, child index) pairs and arrays their child indexes,
    so parent/child links are plain integers into the owning tree's arena.
    The bookkeeping fields (id, parent_*, array_index, table_name) are the only
    fields the passes ever change.
    """

    kind: NodeKind
    value: Any = None
    pairs: List[Tuple[str, int]] = field(default_factory=list)
    elements: List[int] = field(default_factory=list)
    parent: int = -1

    id: int = -1
    parent_id: int = -1
    parent_table: str = ""
    parent_key: str = ""
    array_index: int = -1
    table_name: str = ""

    @property
    def is_scalar(self):
        return self.kind in SCALAR_KINDS

    def text(self):
        """Render a scalar the way it is written into a column."""
        if self.kind == NodeKind.STRING or self.kind == NodeKind.NUMBER:
            return self.value
        elif self.kind == NodeKind.BOOLEAN:
            return "true" if self.value else "false"
        elif self.kind == NodeKind.NULL:
            return ""
        raise TreeContractError(f"{self.kind.value} node has no scalar text")


class NumberText(str):
    """Lexical text of a JSON number, kept as-is to avoid float round-off."""


class DocumentTree:
    """
    Arena of nodes addressed by index. The root is the first node added.
    """

    def __init__(self):
        self.nodes: List[Node] = []
        self.root = -1

    def __len__(self):
        return len(self.nodes)

    def add(self, node: Node) -> int:
        self.nodes.append(node)
        index = len(self.nodes) - 1
        if self.root == -1:
            self.root = index
        return index

    def node(self, index: int) -> Node:
        return self.nodes[index]

    def is_object_array(self, index):
        """True for a non-empty array whose elements are all objects."""
        elements = self.nodes[index].elements
        return bool(elements) and all(self.nodes[i].kind == NodeKind.OBJECT for i in elements)

    def is_scalar_array(self, index):
        """True for a non-empty array whose elements are all scalars."""
        elements = self.nodes[index].elements
        return bool(elements) and all(self.nodes[i].is_scalar for i in elements)

    def expect(self, index, kind):
        """Fetch a node, failing loudly if it is not of the expected kind."""
        node = self.nodes[index]
        if node.kind != kind:
            raise TreeContractError(
                f"Node {index} is {node.kind.value}, expected {kind.value}"
            )
        return node


class TreeBuilder:
    """
    Builds a DocumentTree from JSON text or an already parsed Python value.
    """

    def build(self, json_data) -> DocumentTree:
        """
        Args:
            json_data: JSON text, or the result of json.load(s)

        Returns:
            DocumentTree: the typed tree, rooted at index 0
        """
        # Parse JSON if it's a string, keeping number literals verbatim
        if isinstance(json_data, str):
            try:
                json_data = json.loads(
                    json_data,
                    parse_int=NumberText,
                    parse_float=NumberText,
                    parse_constant=_reject_constant,
                )
            except json.JSONDecodeError:
                raise ValueError("Invalid JSON string provided")

        tree = DocumentTree()
        self._build(tree, json_data, -1)
        return tree

    def _build(self, tree, value, parent):
        # bool must come before int, since bool subclasses int
        if isinstance(value, bool):
            return tree.add(Node(NodeKind.BOOLEAN, value=value, parent=parent))
        if isinstance(value, NumberText):
            return tree.add(Node(NodeKind.NUMBER, value=str(value), parent=parent))
        if isinstance(value, str):
            return tree.add(Node(NodeKind.STRING, value=value, parent=parent))
        if isinstance(value, int):
            return tree.add(Node(NodeKind.NUMBER, value=str(value), parent=parent))
        if isinstance(value, float):
            return tree.add(Node(NodeKind.NUMBER, value=repr(value), parent=parent))
        if value is None:
            return tree.add(Node(NodeKind.NULL, parent=parent))

        if isinstance(value, dict):
            index = tree.add(Node(NodeKind.OBJECT, parent=parent))
            pairs = [(str(key), self._build(tree, item, index)) for key, item in value.items()]
            tree.nodes[index].pairs = pairs
            return index

        if isinstance(value, (list, tuple)):
            index = tree.add(Node(NodeKind.ARRAY, parent=parent))
            elements = [self._build(tree, item, index) for item in value]
            tree.nodes[index].elements = elements
            return index

        raise TypeError(f"Unsupported JSON value type: {type(value)!r}")


def _reject_constant(name):
    raise json.JSONDecodeError(f"Non-standard constant {name}", name, 0)


def build_tree(json_data) -> DocumentTree:
    """Shortcut for TreeBuilder().build(json_data)."""
    return TreeBuilder().build(json_data)


def format_tree(tree: DocumentTree, index: Optional[int] = None, indent=0) -> str:
    """
    Render the tree as indented text for debugging.

    Objects show their table and id once the passes have assigned them.
    """
    if index is None:
        if tree.root == -1:
            return "Empty tree"
        index = tree.root
    return "\n".join(_format_lines(tree, index, indent, ""))


def _format_lines(tree, index, indent, label):
    pad = "  " * indent
    node = tree.node(index)
    if node.kind == NodeKind.OBJECT:
        header = "OBJECT"
        if node.table_name:
            header += f" (Table: {node.table_name}, ID: {node.id})"
        lines = [f"{pad}{label}{header} {{"]
        for key, child in node.pairs:
            lines.extend(_format_lines(tree, child, indent + 1, f'"{key}": '))
        lines.append(f"{pad}}}")
        return lines
    if node.kind == NodeKind.ARRAY:
        header = "ARRAY"
        if node.parent_key:
            header += f" (Key: {node.parent_key})"
        lines = [f"{pad}{label}{header} ["]
        for position, child in enumerate(node.elements):
            lines.extend(_format_lines(tree, child, indent + 1, f"[{position}]: "))
        lines.append(f"{pad}]")
        return lines
    if node.kind == NodeKind.STRING:
        return [f'{pad}{label}STRING "{node.value}"']
    if node.kind == NodeKind.NUMBER:
        return [f"{pad}{label}NUMBER {node.value}"]
    if node.kind == NodeKind.BOOLEAN:
        return [f"{pad}{label}BOOLEAN {node.text()}"]
    if node.kind == NodeKind.NULL:
        return [f"{pad}{label}NULL"]
    raise TreeContractError(f"Unknown node kind {node.kind!r}")
