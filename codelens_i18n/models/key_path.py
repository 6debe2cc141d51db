"""Dot-separated key path access into locale trees."""

from typing import Iterator, List, Optional

from .locale_tree import Branch, Leaf, Node

SEPARATOR = "."


def split_key(key: str) -> List[str]:
    """Split a key path into its segments. Dots inside a segment are not escapable."""
    return key.split(SEPARATOR)


def get_value(tree: Node, key: str) -> Optional[str]:
    """
    Look up the string stored at a key path.

    Args:
        tree: Root of a locale tree
        key: Dot-separated key path (e.g. "common.button.save")

    Returns:
        The string value, or None when a segment is missing, a prefix
        segment is not an object, or the final value is not a string
    """
    node = tree
    for segment in split_key(key):
        if not isinstance(node, Branch) or segment not in node.children:
            return None
        node = node.children[segment]

    return node.value if isinstance(node, Leaf) else None


def set_value(tree: Branch, key: str, value: str) -> None:
    """
    Store a string at a key path, creating intermediate objects as needed.

    An intermediate value that is not an object is replaced with an empty
    object, discarding what was there.
    """
    segments = split_key(key)
    current = tree

    for segment in segments[:-1]:
        child = current.children.get(segment)
        if not isinstance(child, Branch):
            child = Branch()
            current.children[segment] = child
        current = child

    current.children[segments[-1]] = Leaf(value)


def delete_value(tree: Branch, key: str) -> bool:
    """
    Remove the value at a key path. Emptied parent objects are kept.

    Returns:
        True if something was removed, False if the path did not exist
    """
    segments = split_key(key)
    current: Node = tree

    for segment in segments[:-1]:
        if not isinstance(current, Branch) or segment not in current.children:
            return False
        current = current.children[segment]

    if isinstance(current, Branch) and segments[-1] in current.children:
        del current.children[segments[-1]]
        return True
    return False


def iter_keys(tree: Node, prefix: Optional[str] = None) -> Iterator[str]:
    """Yield the key path of every string leaf, in object traversal order."""
    if not isinstance(tree, Branch):
        return

    for segment, child in tree.children.items():
        full_key = segment if prefix is None else f"{prefix}{SEPARATOR}{segment}"
        if isinstance(child, Branch):
            yield from iter_keys(child, full_key)
        elif isinstance(child, Leaf):
            yield full_key
