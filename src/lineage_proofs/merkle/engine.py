"""
Merkle Engine

Builds a fixed-depth Poseidon tree over leaf records, pads it
deterministically, extracts inclusion proofs and verifies them. The engine
holds no tree state between calls: every proof is served from a freshly built
tree over the records passed in.
"""

import logging
from typing import List, Sequence, Tuple, Union

from ..constants import MERKLE_PATH_LEN, PADDING_SENTINEL
from ..errors import LeafNotFoundError, ProofConstructionError
from ..field import FieldElement, encode, to_field_element, to_hex32
from ..leaf import LeafRecord
from ..oracle import HashOracle
from .proof import (
    MerkleProof,
    compute_root_from_proof,
    extract_path,
    validate_proof_length,
    verify_merkle_proof,
)
from .tree import build_levels, check_capacity, validate_tree_structure

logger = logging.getLogger(__name__)

FieldLike = Union[int, str, bytes]


class MerkleEngine:
    """Stateless proof builder/verifier bound to one hash oracle and depth."""

    def __init__(self, oracle: HashOracle, depth: int = MERKLE_PATH_LEN):
        """
        Args:
            oracle: Hash oracle; its one-time setup runs here
            depth: Fixed tree depth D (the tree always has 2**D leaves)
        """
        if depth < 1:
            raise ValueError(f"Tree depth must be positive, got {depth}")
        self.oracle = oracle
        self.depth = depth
        self.oracle.setup()

    @property
    def capacity(self) -> int:
        return 1 << self.depth

    def leaf_commitment(self, record: LeafRecord) -> FieldElement:
        """Hash3(encode(ancestor_id), encode(relation), encode(descendant_id))."""
        return self.oracle.hash3(
            encode(record.ancestor_id),
            encode(record.relation),
            encode(record.descendant_id),
        )

    def padding_leaf(self, position: int) -> FieldElement:
        """Padding leaf for ``position``; distinct positions give distinct leaves."""
        sentinel = encode(PADDING_SENTINEL)
        return self.oracle.hash3(sentinel, sentinel, encode(str(position)))

    def build_leaves(self, records: Sequence[LeafRecord]) -> Tuple[List[FieldElement], int]:
        """
        Commit to every record in order and pad to the full capacity.

        Returns:
            (padded leaves, number of real leaves)

        Raises:
            CapacityExceededError: If there are more records than leaves
        """
        check_capacity(len(records), self.depth)
        leaves = [self.leaf_commitment(r) for r in records]
        real_count = len(leaves)
        while len(leaves) < self.capacity:
            leaves.append(self.padding_leaf(len(leaves)))
        return leaves, real_count

    def build_tree(self, records: Sequence[LeafRecord]) -> List[List[FieldElement]]:
        """Build all tree levels (leaves first, root last) over ``records``."""
        leaves, _ = self.build_leaves(records)
        levels = build_levels(leaves, self.oracle.hash2)
        if not validate_tree_structure(levels, self.depth):
            raise ProofConstructionError("Built tree does not have the expected shape")
        return levels

    def compute_root(self, records: Sequence[LeafRecord]) -> FieldElement:
        """Root of the padded tree over ``records``."""
        return self.build_tree(records)[-1][0]

    def build_proof(self, all_records: Sequence[LeafRecord], query: LeafRecord) -> MerkleProof:
        """
        Build an inclusion proof for ``query`` within ``all_records``.

        Args:
            all_records: Complete candidate set, already filtered of incomplete records
            query: Record to prove

        Returns:
            MerkleProof with leaf index, leaf-to-root path and root

        Raises:
            CapacityExceededError: More records than the tree holds
            LeafNotFoundError: ``query`` is not among the records
            ProofConstructionError: The proof does not recompute the root
        """
        leaves, real_count = self.build_leaves(all_records)
        query_leaf = self.leaf_commitment(query)

        # Padding leaves are not members of the record set, so only real leaves match
        try:
            leaf_index = leaves.index(query_leaf, 0, real_count)
        except ValueError:
            raise LeafNotFoundError(
                f"Record {query.to_dict()} is not in the committed set of {real_count} records",
                details={"query": query.to_dict(), "record_count": real_count},
            ) from None

        levels = build_levels(leaves, self.oracle.hash2)
        for level, nodes in enumerate(levels):
            logger.debug(f"Level {level}: {[to_hex32(n) for n in nodes]}")

        path = extract_path(levels, leaf_index)
        validate_proof_length(path, self.depth)
        root = levels[self.depth][0]

        recomputed = compute_root_from_proof(query_leaf, path, leaf_index, self.oracle.hash2, self.depth)
        if recomputed != root:
            raise ProofConstructionError(
                f"Recomputed root {to_hex32(recomputed)} != tree root {to_hex32(root)}"
            )

        logger.info(f"Built Merkle proof: leaf_index={leaf_index} root={to_hex32(root)} records={real_count}")
        return MerkleProof(leaf_index=leaf_index, path=path, root=root, leaf=query_leaf)

    def compute_root_from_proof(self, leaf: FieldLike, path: Sequence[FieldLike], index: int) -> FieldElement:
        """Recompute the root from a leaf, its path and its index."""
        return compute_root_from_proof(
            to_field_element(leaf),
            [to_field_element(p) for p in path],
            index,
            self.oracle.hash2,
            self.depth,
        )

    def verify(self, leaf: FieldLike, path: Sequence[FieldLike], root: FieldLike, index: int) -> bool:
        """
        Check a proof against ``root``.

        Values may be ints or hex strings of any case; they are compared as
        canonical field elements.

        Raises:
            BadPathLengthError: If ``len(path) != depth``
        """
        return verify_merkle_proof(
            to_field_element(leaf),
            [to_field_element(p) for p in path],
            to_field_element(root),
            index,
            self.oracle.hash2,
            self.depth,
        )

    def verify_record(self, record: LeafRecord, proof: MerkleProof) -> bool:
        """Verify that ``proof`` proves membership of ``record``."""
        return self.verify(self.leaf_commitment(record), proof.path, proof.root, proof.leaf_index)
