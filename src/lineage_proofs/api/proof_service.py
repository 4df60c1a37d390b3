"""
Proof Service Module

Orchestrates a proof request end to end: the lineage resolver picks the
triple, the record set is mapped and filtered at the boundary, the Merkle
engine builds the proof, and the result is validated as the proving-service
payload before it leaves this package.
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..constants import MERKLE_PATH_LEN
from ..errors import BadPathLengthError, InvalidInputError
from ..leaf import LeafRecord, filter_leaf_records
from ..lineage import LINEAGE, LineageResolver, LineageStore, LineageView, RecordFamily
from ..merkle import MerkleEngine
from ..models import ProofRequestPayload
from .proving_client import ProvingServiceClient

logger = logging.getLogger(__name__)


def collect_leaf_records(store: LineageStore, family: RecordFamily) -> List[LeafRecord]:
    """
    Map every stored record to its leaf triple, dropping incomplete ones.

    Malformed candidates are filtered here, before the Merkle engine sees
    them, rather than failing the whole build.

    Returns:
        Complete leaf records in store order
    """
    candidates = []
    skipped = 0
    for record in store.find_all_records():
        group = store.find_node(record.group_id) if record.group_id is not None else None
        triple = family.to_leaf_triple(record, group)
        if triple is None:
            skipped += 1
            continue
        candidates.append(triple)
    if skipped:
        logger.warning(f"Skipped {skipped} record(s) without a complete {family.name} triple")

    records = filter_leaf_records(candidates)
    logger.info(f"Collected {len(records)} leaf record(s) for Merkle tree construction")
    return records


class ProofService:
    """Service for preparing, submitting and re-verifying lineage proofs."""

    def __init__(
        self,
        store: LineageStore,
        engine: MerkleEngine,
        family: RecordFamily = LINEAGE,
        resolver: Optional[LineageResolver] = None,
        proving_client: Optional[ProvingServiceClient] = None,
    ):
        """
        Initialize the proof service.

        Args:
            store: Persistence collaborator
            engine: Merkle engine bound to the circuit's hash oracle
            family: Entity family of the records in ``store``
            resolver: LineageResolver. If None, one is built over ``store``.
            proving_client: ProvingServiceClient. If None, a new client will
                            only be created when a proof is submitted.
        """
        self.store = store
        self.engine = engine
        self.family = family
        self.resolver = resolver or LineageResolver(store, family)
        self.proving_client = proving_client

    def collect_leaf_records(self) -> List[LeafRecord]:
        """Complete leaf records of the whole store, in store order."""
        return collect_leaf_records(self.store, self.family)

    def prepare_proof_inputs(
        self,
        descendant_id: str,
        relationship: str,
        ancestor_id: Optional[str] = None,
    ) -> ProofRequestPayload:
        """
        Build the proving-service payload for one record.

        Args:
            descendant_id: Public id of the record to prove
            relationship: Relation the record carries
            ancestor_id: Expected ancestor public id, checked if given

        Returns:
            Validated ProofRequestPayload

        Raises:
            InvalidInputError: If ``ancestor_id`` disagrees with the stored ancestor
            NotFoundError, InvalidStateError: From the resolver
            LeafNotFoundError: If the record is not in the committed set
            BadPathLengthError: If the proof path is not MERKLE_PATH_LEN long
        """
        target = self.resolver.select_proof_triple(descendant_id, relationship)

        if ancestor_id is not None and ancestor_id != target.ancestor_id:
            raise InvalidInputError(
                f"Ancestor mismatch: provided \"{ancestor_id}\", stored \"{target.ancestor_id}\"",
                details={"provided": ancestor_id, "stored": target.ancestor_id},
            )

        all_records = self.collect_leaf_records()
        proof = self.engine.build_proof(all_records, target)

        if len(proof.path) != MERKLE_PATH_LEN:
            raise BadPathLengthError(
                f"Merkle path has {len(proof.path)} entries, circuit expects {MERKLE_PATH_LEN}",
                details={"path_length": len(proof.path), "expected": MERKLE_PATH_LEN},
            )

        payload = ProofRequestPayload.from_proof(target, proof)
        logger.info(
            f"Prepared proof inputs for {descendant_id}: leaf_index={payload.merkle_leaf_index} "
            f"root={payload.merkle_root}"
        )
        return payload

    def prepare_proof_inputs_for(
        self,
        identifier: str,
        ancestor_id: Optional[str] = None,
    ) -> ProofRequestPayload:
        """
        Build the proving-service payload for a record or group identifier.

        The resolver maps a group to its head record (else its first member)
        and the record's stored relationship is proven.
        """
        target = self.resolver.select_proof_triple_for(identifier)
        return self.prepare_proof_inputs(target.descendant_id, target.relation, ancestor_id)

    def generate_proof(
        self,
        descendant_id: str,
        relationship: str,
        ancestor_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Prepare the payload and submit it to the proving service.

        Returns:
            Dictionary with the submitted ``payload`` and the service ``result``
        """
        payload = self.prepare_proof_inputs(descendant_id, relationship, ancestor_id)

        if not self.proving_client:
            self.proving_client = ProvingServiceClient()

        result = self.proving_client.generate_proof(payload)
        return {"payload": payload.model_dump(), "result": result}

    def verify_payload(self, payload: Any) -> bool:
        """
        Re-verify a proving payload against its own root.

        Args:
            payload: ProofRequestPayload or a dict in its shape

        Returns:
            True if the triple's leaf commitment is proven by the path and root

        Raises:
            InvalidInputError: If the payload does not match the schema
        """
        if not isinstance(payload, ProofRequestPayload):
            try:
                payload = ProofRequestPayload.model_validate(payload)
            except ValidationError as e:
                raise InvalidInputError(f"Invalid proving payload: {e}") from e

        leaf = self.engine.leaf_commitment(payload.to_leaf_record())
        return self.engine.verify(leaf, payload.merkle_path, payload.merkle_root, payload.merkle_leaf_index)

    def resolve_lineage(self, identifier: str) -> LineageView:
        """Resolve an identifier to its lineage view."""
        return self.resolver.resolve_target(identifier)
