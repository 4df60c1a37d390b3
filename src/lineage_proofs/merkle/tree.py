"""
Merkle Tree Building Utilities

A tree is a list of levels: ``levels[0]`` holds the leaves and every following
level is half the length of the one below, ending in a single root at
``levels[depth]``. Nodes are field elements; the node hash is injected so the
structure code stays independent of the hash oracle.
"""

from typing import Callable, List

from ..errors import CapacityExceededError, InvalidInputError
from ..field import FieldElement

NodeHash = Callable[[FieldElement, FieldElement], FieldElement]


def get_tree_depth(capacity: int) -> int:
    """
    Calculate the depth of a merkle tree for given capacity.

    Args:
        capacity: Number of leaves (must be a power of two)

    Returns:
        Tree depth (number of levels from leaves to root)

    Examples:
        >>> get_tree_depth(8)
        3
    """
    if capacity < 1 or capacity & (capacity - 1) != 0:
        raise InvalidInputError("Capacity must be a power of two")

    return capacity.bit_length() - 1


def check_capacity(leaf_count: int, depth: int) -> None:
    """Raise CapacityExceededError if ``leaf_count`` real leaves do not fit."""
    capacity = 1 << depth
    if leaf_count > capacity:
        raise CapacityExceededError(
            f"Too many leaves: {leaf_count} > {capacity} (depth {depth})",
            details={"leaf_count": leaf_count, "capacity": capacity},
        )


def build_levels(leaves: List[FieldElement], node_hash: NodeHash) -> List[List[FieldElement]]:
    """
    Build every level of the tree bottom-up.

    Adjacent nodes ``(2i, 2i+1)`` are hashed left-then-right into index ``i``
    of the next level.

    Args:
        leaves: Padded leaf level (length must be a power of two)
        node_hash: Arity-2 hash

    Returns:
        All levels from leaves to root
    """
    depth = get_tree_depth(len(leaves))
    levels = [list(leaves)]
    current = levels[0]
    for _ in range(depth):
        current = [node_hash(current[i], current[i + 1]) for i in range(0, len(current), 2)]
        levels.append(current)
    return levels


def validate_tree_structure(levels: List[List[FieldElement]], depth: int) -> bool:
    """
    Validate that ``levels`` is a complete binary tree of the given depth.

    Returns:
        True if there are depth + 1 levels, each half the previous, ending in one root
    """
    if len(levels) != depth + 1:
        return False

    if len(levels[0]) != 1 << depth:
        return False

    for i in range(1, len(levels)):
        if len(levels[i]) * 2 != len(levels[i - 1]):
            return False

    return len(levels[-1]) == 1
