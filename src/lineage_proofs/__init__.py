"""
Lineage Proofs

Merkle commitments over genealogical records, for zero-knowledge proofs of
lineage. A record states that a descendant has a relation to an ancestor
group; the set of records is committed to in a fixed-depth Poseidon Merkle
tree whose root and inclusion paths feed an external proving circuit.

Key features:
- Field encoding of identifiers into the circuit's prime field
- Fixed-depth, deterministically padded Merkle trees and inclusion proofs
- Pluggable hash oracle (remote Poseidon service, local SHA-256 for development)
- Lineage resolution: ancestor chain, siblings and proof-triple selection
- Validated payloads for the external proving service

Modules:
- constants: field and protocol constants
- errors: typed error taxonomy
- field: Field Encoder
- oracle: hash oracles
- merkle: Merkle Engine
- lineage: record/node types, entity families, store and resolver
- models: boundary payload models
- api: proof orchestration and proving-service client
- main: file-based entry points
"""

__version__ = "0.1.0"

# Core functionality
from .constants import FIELD_MODULUS, MERKLE_PATH_LEN, TREE_CAPACITY
from .errors import (
    LineageProofError,
    InvalidInputError,
    LeafNotFoundError,
    NotFoundError,
    InvalidStateError,
    BadPathLengthError,
    CapacityExceededError,
    ProofConstructionError,
    OracleError,
    ProvingServiceError,
)
from .field import FieldElement, encode, to_hex32, from_hex32
from .leaf import LeafRecord, filter_leaf_records

# Hashing and commitments
from .oracle import HashOracle, PoseidonServiceOracle, Sha256FieldOracle, create_oracle
from .merkle import MerkleEngine, MerkleProof

# Lineage
from .lineage import (
    LineageResolver,
    LineageView,
    LineageStore,
    InMemoryLineageStore,
    RecordFamily,
    get_family,
    load_records_file,
)

# Services
from .models import ProofRequestPayload
from .api import ProofService, ProvingServiceClient

__all__ = [
    '__version__',

    # Constants
    'FIELD_MODULUS',
    'MERKLE_PATH_LEN',
    'TREE_CAPACITY',

    # Errors
    'LineageProofError',
    'InvalidInputError',
    'LeafNotFoundError',
    'NotFoundError',
    'InvalidStateError',
    'BadPathLengthError',
    'CapacityExceededError',
    'ProofConstructionError',
    'OracleError',
    'ProvingServiceError',

    # Field
    'FieldElement',
    'encode',
    'to_hex32',
    'from_hex32',
    'LeafRecord',
    'filter_leaf_records',

    # Hashing and commitments
    'HashOracle',
    'PoseidonServiceOracle',
    'Sha256FieldOracle',
    'create_oracle',
    'MerkleEngine',
    'MerkleProof',

    # Lineage
    'LineageResolver',
    'LineageView',
    'LineageStore',
    'InMemoryLineageStore',
    'RecordFamily',
    'get_family',
    'load_records_file',

    # Services
    'ProofRequestPayload',
    'ProofService',
    'ProvingServiceClient',
]
