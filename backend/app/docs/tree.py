"""Category tree operations.

Trees are lists of CategoryNode walked depth-first (pre-order). Every mutating
helper works on a deep copy and returns the new tree; callers persist it.
"""

import uuid
from collections.abc import Iterator

from backend.app.errors import NotFoundError
from backend.app.models.docs import CategoryNode


def new_node_id() -> str:
    """Generate a node id unique within a document."""
    return uuid.uuid4().hex


def iter_nodes(nodes: list[CategoryNode], depth: int = 0) -> Iterator[tuple[CategoryNode, int]]:
    """Yield (node, depth) pairs in depth-first pre-order."""
    for node in nodes:
        yield node, depth
        yield from iter_nodes(node.children, depth + 1)


def find_node(nodes: list[CategoryNode], node_id: str) -> CategoryNode | None:
    """Return the first node with the given id, searching depth-first."""
    for node, _ in iter_nodes(nodes):
        if node.id == node_id:
            return node
    return None


def add_node(
    nodes: list[CategoryNode],
    parent_id: str | None,
    name: str,
    content: str,
) -> tuple[list[CategoryNode], CategoryNode]:
    """Append a new node at the top level or as the last child of parent_id.

    Args:
        nodes: Current tree
        parent_id: Parent node id at any depth, or None for a top-level node
        name: Node name
        content: Text owned by the node

    Returns:
        (new tree, created node)

    Raises:
        NotFoundError: If parent_id is given and not present in the tree
    """
    tree = [n.model_copy(deep=True) for n in nodes]
    created = CategoryNode(id=new_node_id(), name=name, content=content)

    if parent_id is None:
        tree.append(created)
        return tree, created

    parent = find_node(tree, parent_id)
    if parent is None:
        raise NotFoundError(f"Parent category {parent_id} not found")

    parent.children.append(created)
    return tree, created


def update_node(
    nodes: list[CategoryNode],
    node_id: str,
    *,
    name: str | None = None,
    content: str | None = None,
) -> list[CategoryNode]:
    """Patch name and/or content of the node with node_id at any depth.

    Raises:
        NotFoundError: If node_id is not present in the tree
    """
    tree = [n.model_copy(deep=True) for n in nodes]
    node = find_node(tree, node_id)
    if node is None:
        raise NotFoundError(f"Category {node_id} not found")

    if name is not None:
        node.name = name
    if content is not None:
        node.content = content
    return tree


def remove_node(nodes: list[CategoryNode], node_id: str) -> tuple[list[CategoryNode], bool]:
    """Remove the first depth-first match and its subtree.

    Returns:
        (new tree, whether a node was removed). An unknown id yields an
        unchanged copy and False.
    """
    tree = [n.model_copy(deep=True) for n in nodes]
    return tree, _remove_first(tree, node_id)


def _remove_first(nodes: list[CategoryNode], node_id: str) -> bool:
    for index, node in enumerate(nodes):
        if node.id == node_id:
            del nodes[index]
            return True
        if _remove_first(node.children, node_id):
            return True
    return False
