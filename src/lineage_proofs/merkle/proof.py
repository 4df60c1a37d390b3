"""
Merkle Proof Generation and Verification

Functions for extracting an authentication path from a built tree and for
recomputing a root from a leaf, its path and its index.

Left/right rule, shared with the circuit: at depth ``k`` the bit
``(index >> k) & 1`` decides the side. Bit 0 means the running node is the
left input and the sibling the right; bit 1 means the sibling goes left.
"""

from dataclasses import dataclass, field
from typing import List, Sequence

from ..errors import BadPathLengthError, InvalidInputError
from ..field import FieldElement, to_hex32
from .tree import NodeHash


@dataclass(frozen=True)
class MerkleProof:
    """Inclusion proof for one leaf of a fixed-depth tree."""
    leaf_index: int
    path: List[FieldElement]
    root: FieldElement
    leaf: FieldElement = field(default=0, compare=False)

    @property
    def path_hex(self) -> List[str]:
        return [to_hex32(node) for node in self.path]

    @property
    def root_hex(self) -> str:
        return to_hex32(self.root)

    @property
    def leaf_hex(self) -> str:
        return to_hex32(self.leaf)


def validate_proof_length(path: Sequence[FieldElement], depth: int) -> None:
    """
    Require a path of exactly ``depth`` entries.

    A short or long path is never truncated or padded: the circuit takes a
    fixed-width public input.

    Raises:
        BadPathLengthError: If the lengths differ
    """
    if len(path) != depth:
        raise BadPathLengthError(
            f"Merkle path has {len(path)} entries, expected {depth}",
            details={"path_length": len(path), "expected": depth},
        )


def check_leaf_index(index: int, depth: int) -> None:
    """Raise InvalidInputError unless ``0 <= index < 2**depth``."""
    if isinstance(index, bool) or not isinstance(index, int):
        raise InvalidInputError(f"Leaf index must be an integer, got {type(index).__name__}")
    if not 0 <= index < (1 << depth):
        raise InvalidInputError(f"Leaf index {index} outside [0, {1 << depth})")


def get_proof_indices(index: int, depth: int) -> List[int]:
    """
    Calculate the sibling index at each level of the path.

    Examples:
        >>> get_proof_indices(5, 3)
        [4, 3, 0]
    """
    indices = []
    current_index = index

    for _ in range(depth):
        indices.append(current_index ^ 1)
        current_index //= 2

    return indices


def extract_path(levels: List[List[FieldElement]], index: int) -> List[FieldElement]:
    """
    Walk up from leaf ``index`` collecting the sibling at every level.

    Args:
        levels: Complete tree as returned by ``build_levels``
        index: Leaf position

    Returns:
        Sibling nodes ordered leaf-to-root
    """
    depth = len(levels) - 1
    return [levels[level][sibling] for level, sibling in enumerate(get_proof_indices(index, depth))]


def compute_root_from_proof(
    leaf: FieldElement,
    path: Sequence[FieldElement],
    index: int,
    node_hash: NodeHash,
    depth: int,
) -> FieldElement:
    """
    Rebuild the root from a leaf and its authentication path.

    Args:
        leaf: Leaf commitment
        path: Sibling nodes, leaf-to-root
        index: Leaf position in the padded tree
        node_hash: Arity-2 hash
        depth: Tree depth the path must match

    Returns:
        The recomputed root

    Raises:
        BadPathLengthError: If ``len(path) != depth``
        InvalidInputError: If ``index`` is outside the tree
    """
    validate_proof_length(path, depth)
    check_leaf_index(index, depth)

    current = leaf
    for level, sibling in enumerate(path):
        if (index >> level) & 1:
            # Our node was on the right, sibling is on the left
            current = node_hash(sibling, current)
        else:
            # Our node was on the left, sibling is on the right
            current = node_hash(current, sibling)
    return current


def verify_merkle_proof(
    leaf: FieldElement,
    path: Sequence[FieldElement],
    root: FieldElement,
    index: int,
    node_hash: NodeHash,
    depth: int,
) -> bool:
    """
    Verify a proof against a presented root.

    An index outside the tree is simply not a valid proof. A path of the wrong
    length is a caller bug and still raises BadPathLengthError.
    """
    validate_proof_length(path, depth)
    try:
        check_leaf_index(index, depth)
    except InvalidInputError:
        return False
    return compute_root_from_proof(leaf, path, index, node_hash, depth) == root


def batch_verify_proofs(
    leaves: Sequence[FieldElement],
    proofs: Sequence[MerkleProof],
    node_hash: NodeHash,
    depth: int,
) -> List[bool]:
    """Verify several proofs, each against its own root."""
    return [
        verify_merkle_proof(leaf, proof.path, proof.root, proof.leaf_index, node_hash, depth)
        for leaf, proof in zip(leaves, proofs)
    ]
