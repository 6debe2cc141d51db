"""Data models for parsed locale JSON trees."""

from dataclasses import dataclass, field
from typing import Any, Dict, Union


@dataclass
class Leaf:
    """A translated string."""

    value: str


@dataclass
class Branch:
    """A nested object of translation segments."""

    children: Dict[str, "Node"] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.children)


@dataclass
class Opaque:
    """A JSON value that is not a translation (number, boolean, null, array)."""

    value: Any


Node = Union[Leaf, Branch, Opaque]


def from_json(data: Any) -> Node:
    """
    Convert decoded JSON data into a locale tree node.

    Args:
        data: Value produced by json.load / json.loads

    Returns:
        Branch for objects, Leaf for strings, Opaque for everything else
    """
    if isinstance(data, dict):
        return Branch({str(key): from_json(value) for key, value in data.items()})
    if isinstance(data, str):
        return Leaf(data)
    return Opaque(data)


def to_json(node: Node) -> Any:
    """Convert a locale tree node back into plain JSON data."""
    if isinstance(node, Branch):
        return {key: to_json(child) for key, child in node.children.items()}
    return node.value
