"""
Merkle Tree Operations

Fixed-depth Poseidon commitment trees over lineage leaf records.

The package is organized into three components:
- tree: level construction and structural validation
- proof: path extraction, root recomputation and verification
- engine: the MerkleEngine facade binding a hash oracle and tree depth
"""

from .tree import (
    build_levels,
    check_capacity,
    get_tree_depth,
    validate_tree_structure,
)

from .proof import (
    MerkleProof,
    batch_verify_proofs,
    check_leaf_index,
    compute_root_from_proof,
    extract_path,
    get_proof_indices,
    validate_proof_length,
    verify_merkle_proof,
)

from .engine import MerkleEngine

__all__ = [
    # Tree utilities
    "build_levels",
    "check_capacity",
    "get_tree_depth",
    "validate_tree_structure",
    # Proof functions
    "MerkleProof",
    "batch_verify_proofs",
    "check_leaf_index",
    "compute_root_from_proof",
    "extract_path",
    "get_proof_indices",
    "validate_proof_length",
    "verify_merkle_proof",
    # Engine
    "MerkleEngine",
]
