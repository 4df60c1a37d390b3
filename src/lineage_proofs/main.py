"""
Lineage Proofs - Main proof generation module

This module contains the file-based entry points used by the CLI and tests:
generating a proving payload from a record export, resolving a lineage view,
re-verifying a saved payload and summarizing a record set.
"""

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

from pydantic import ValidationError

from .api import ProofService, collect_leaf_records
from .config import get_settings
from .constants import TREE_CAPACITY
from .errors import InvalidInputError
from .field import to_hex32
from .lineage import LineageResolver, RecordFamily, get_family, load_records_file
from .lineage.store import InMemoryLineageStore
from .merkle import MerkleEngine
from .models import LineageResponse, ProofRequestPayload
from .oracle import HashOracle, create_oracle

logger = logging.getLogger(__name__)

OracleLike = Union[HashOracle, str, None]
FamilyLike = Union[RecordFamily, str, None]


@dataclass
class LineageProofResult:
    """Container for proof generation results."""
    payload: ProofRequestPayload
    leaf: str
    metadata: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"payload": self.payload.model_dump(), "leaf": self.leaf, "metadata": self.metadata}


@dataclass
class VerificationResult:
    """Container for payload verification results."""
    valid: bool
    leaf: str
    computed_root: str
    presented_root: str
    leaf_index: int


@dataclass
class RecordSetSummary:
    """Container for record set inspection results."""
    family: str
    node_count: int
    record_count: int
    leaf_count: int
    excluded_count: int
    capacity: int
    root: Optional[str]


def _resolve_family(family: FamilyLike) -> RecordFamily:
    if isinstance(family, RecordFamily):
        return family
    return get_family(family or get_settings().record_family)


def _resolve_oracle(oracle: OracleLike) -> HashOracle:
    if isinstance(oracle, HashOracle):
        return oracle
    return create_oracle(oracle)


def load_store(records_file: str, family: FamilyLike = None) -> Tuple[InMemoryLineageStore, RecordFamily]:
    """Load a record export file with the given (or configured) family."""
    record_family = _resolve_family(family)
    logger.info(f"Loading {record_family.name} records from {records_file}")
    return load_records_file(records_file, record_family), record_family


def generate_lineage_proof(
    records_file: str,
    descendant_id: str,
    relationship: Optional[str] = None,
    family: FamilyLike = None,
    oracle: OracleLike = None,
    ancestor_id: Optional[str] = None,
) -> LineageProofResult:
    """
    Generate the proving payload for one record of a record export.

    Args:
        records_file: Path to the JSON record export
        descendant_id: Public id of the record to prove. Without a
            relationship this may also be a group public id.
        relationship: Relation the record carries. If None, the stored
            relationship of the resolved record is proven.
        family: Entity family name or instance. If None, uses RECORD_FAMILY.
        oracle: Hash oracle name or instance. If None, uses HASH_ORACLE.
        ancestor_id: Expected ancestor public id, checked if given

    Returns:
        LineageProofResult with the validated payload
    """
    store, record_family = load_store(records_file, family)
    engine = MerkleEngine(_resolve_oracle(oracle))
    service = ProofService(store, engine, record_family)

    if relationship is not None:
        payload = service.prepare_proof_inputs(descendant_id, relationship, ancestor_id)
    else:
        payload = service.prepare_proof_inputs_for(descendant_id, ancestor_id)
    leaf = engine.leaf_commitment(payload.to_leaf_record())

    metadata = {
        "timestamp": int(time.time()),
        "family": record_family.name,
        "oracle": engine.oracle.name,
        "circuit_compatible": engine.oracle.circuit_compatible,
        "record_count": len(store),
        "proof_length": len(payload.merkle_path),
    }
    return LineageProofResult(payload=payload, leaf=to_hex32(leaf), metadata=metadata)


def generate_lineage_view(
    records_file: str,
    identifier: str,
    family: FamilyLike = None,
    preload_depth: Optional[int] = None,
) -> LineageResponse:
    """
    Resolve an identifier in a record export to its lineage view.

    Returns:
        LineageResponse with the ancestor chain ordered root-first
    """
    store, record_family = load_store(records_file, family)
    resolver = LineageResolver(store, record_family, preload_depth=preload_depth)
    return LineageResponse.from_view(resolver.resolve_target(identifier))


def verify_proof_payload(
    payload: Union[str, Dict[str, Any], ProofRequestPayload],
    oracle: OracleLike = None,
) -> VerificationResult:
    """
    Re-verify a proving payload against the root it carries.

    Args:
        payload: Path to a JSON file, a dict, or a ProofRequestPayload
        oracle: Hash oracle name or instance. If None, uses HASH_ORACLE.

    Raises:
        InvalidInputError: If the payload does not match the schema
    """
    if isinstance(payload, str):
        with open(payload, "r", encoding="utf-8") as f:
            payload = json.load(f)
        # Accept files written by ``prove --format json``
        if isinstance(payload, dict) and "payload" in payload:
            payload = payload["payload"]

    if not isinstance(payload, ProofRequestPayload):
        try:
            payload = ProofRequestPayload.model_validate(payload)
        except ValidationError as e:
            raise InvalidInputError(f"Invalid proving payload: {e}") from e

    engine = MerkleEngine(_resolve_oracle(oracle))
    leaf = engine.leaf_commitment(payload.to_leaf_record())
    computed = engine.compute_root_from_proof(leaf, payload.merkle_path, payload.merkle_leaf_index)
    valid = engine.verify(leaf, payload.merkle_path, payload.merkle_root, payload.merkle_leaf_index)

    logger.info(f"Payload for {payload.descendant_id} verified: {valid}")
    return VerificationResult(
        valid=valid,
        leaf=to_hex32(leaf),
        computed_root=to_hex32(computed),
        presented_root=payload.merkle_root,
        leaf_index=payload.merkle_leaf_index,
    )


def inspect_records(
    records_file: str,
    family: FamilyLike = None,
    oracle: OracleLike = None,
    with_root: bool = True,
) -> RecordSetSummary:
    """
    Summarize a record export: counts, excluded records and the current root.

    The root is omitted when ``with_root`` is False or when the committed set
    does not fit in the tree.
    """
    store, record_family = load_store(records_file, family)

    leaves = collect_leaf_records(store, record_family)

    root = None
    if with_root:
        if len(leaves) <= TREE_CAPACITY:
            engine = MerkleEngine(_resolve_oracle(oracle))
            root = to_hex32(engine.compute_root(leaves))
        else:
            logger.warning(f"{len(leaves)} leaf records exceed tree capacity {TREE_CAPACITY}; no root")

    return RecordSetSummary(
        family=record_family.name,
        node_count=len(store.nodes),
        record_count=len(store),
        leaf_count=len(leaves),
        excluded_count=len(store) - len(leaves),
        capacity=TREE_CAPACITY,
        root=root,
    )
