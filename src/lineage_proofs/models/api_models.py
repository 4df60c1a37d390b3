"""
API Models

This module defines Pydantic models for every payload that crosses a service
boundary: the proving-service request, the verify request, the lineage view
and the error and health responses.
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..constants import FIELD_ELEMENT_BYTES, MERKLE_PATH_LEN
from ..field import is_hex32
from ..leaf import LeafRecord

if TYPE_CHECKING:
    from ..lineage import LineageNode, LineageView, MemberRecord
    from ..merkle import MerkleProof


class ErrorResponse(BaseModel):
    """
    Response model for errors.

    Attributes:
        error: Error message
        code: Error code (string identifier)
        details: Additional error details
    """
    error: str = Field(..., description="Error message")
    code: str = Field(..., description="Error code")
    details: Optional[dict] = Field(default=None, description="Additional error details")


class HealthResponse(BaseModel):
    """
    Response model for a collaborator health check.

    Attributes:
        status: "ok" if every required collaborator answered
        hash_oracle: Hash oracle reachability
        proving_service: Proving service reachability, None if not configured
        oracle_name: Which hash oracle is configured
        circuit_compatible: Whether that oracle matches the proving circuit
        version: Package version
        timestamp: Response timestamp
    """
    status: str = Field(..., description="Service status")
    hash_oracle: bool = Field(..., description="Hash oracle reachability")
    proving_service: Optional[bool] = Field(default=None, description="Proving service reachability")
    oracle_name: str = Field(..., description="Configured hash oracle")
    circuit_compatible: bool = Field(..., description="Oracle matches the proving circuit's Poseidon")
    version: str = Field(default="0.1.0", description="Package version")
    timestamp: Optional[str] = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        description="Response timestamp",
    )


class ProofRequestPayload(BaseModel):
    """
    Request sent to the proving service's ``/generate-proof``.

    The field set and encodings are the circuit's public-input contract:
    ``merkle_path`` has exactly MERKLE_PATH_LEN entries and every hash is
    ``0x`` followed by 64 lowercase hex digits.
    """
    ancestor_id: str = Field(..., description="Public id of the ancestor group")
    relation: str = Field(..., description="Relation label")
    descendant_id: str = Field(..., description="Public id of the descendant record")
    merkle_leaf_index: int = Field(..., description="Leaf position in the padded tree")
    merkle_path: List[str] = Field(..., description="Sibling hashes, leaf to root")
    merkle_root: str = Field(..., description="Tree root")

    @field_validator('ancestor_id', 'relation', 'descendant_id')
    @classmethod
    def validate_non_empty(cls, v):
        """Identifiers are hashed as strings and may not be empty."""
        if not v:
            raise ValueError("Must be a non-empty string")
        return v

    @field_validator('merkle_leaf_index')
    @classmethod
    def validate_leaf_index(cls, v):
        """Leaf index must address a leaf of the fixed-depth tree."""
        if not 0 <= v < (1 << MERKLE_PATH_LEN):
            raise ValueError(f"merkle_leaf_index must be in [0, {1 << MERKLE_PATH_LEN})")
        return v

    @field_validator('merkle_path')
    @classmethod
    def validate_merkle_path(cls, v):
        """Path must have MERKLE_PATH_LEN canonical hex32 entries."""
        if len(v) != MERKLE_PATH_LEN:
            raise ValueError(f"merkle_path must have exactly {MERKLE_PATH_LEN} entries, got {len(v)}")
        for step in v:
            if not is_hex32(step):
                raise ValueError("All path entries must be 0x-prefixed 32-byte lowercase hex strings")
        return v

    @field_validator('merkle_root')
    @classmethod
    def validate_merkle_root(cls, v):
        """Root must be a canonical hex32 string."""
        if not is_hex32(v):
            raise ValueError("merkle_root must be a 0x-prefixed 32-byte lowercase hex string")
        return v

    @classmethod
    def from_proof(cls, record: LeafRecord, proof: "MerkleProof") -> "ProofRequestPayload":
        return cls(
            ancestor_id=record.ancestor_id,
            relation=record.relation,
            descendant_id=record.descendant_id,
            merkle_leaf_index=proof.leaf_index,
            merkle_path=proof.path_hex,
            merkle_root=proof.root_hex,
        )

    def to_leaf_record(self) -> LeafRecord:
        return LeafRecord(
            ancestor_id=self.ancestor_id,
            relation=self.relation,
            descendant_id=self.descendant_id,
        )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "ancestor_id": "FAM-001",
                "relation": "father",
                "descendant_id": "CIT-002",
                "merkle_leaf_index": 1,
                "merkle_path": [
                    "0x1f3c9a0d8b2e4f6a7c5d3e1b9a8f7e6d5c4b3a2918f7e6d5c4b3a29180f7e6d5",
                    "0x0a1b2c3d4e5f60718293a4b5c6d7e8f90a1b2c3d4e5f60718293a4b5c6d7e8f9",
                    "0x2b3c4d5e6f708192a3b4c5d6e7f8091a2b3c4d5e6f708192a3b4c5d6e7f8091a",
                ],
                "merkle_root": "0x3c4d5e6f708192a3b4c5d6e7f8091a2b3c4d5e6f708192a3b4c5d6e7f8091a2b",
            }
        }
    )


class VerifyProofRequest(BaseModel):
    """
    Request sent to the proving service's ``/verify-proof``.

    Attributes:
        proof: Serialized SNARK proof bytes
        public_inputs: Exactly two public inputs of 32 bytes each
    """
    proof: List[int] = Field(..., description="Proof bytes")
    public_inputs: List[List[int]] = Field(..., description="Two 32-byte public inputs")

    @field_validator('proof')
    @classmethod
    def validate_proof_bytes(cls, v):
        """Proof must be a non-empty list of byte values."""
        if not v:
            raise ValueError("proof cannot be empty")
        if any(not 0 <= b <= 255 for b in v):
            raise ValueError("proof entries must be byte values 0-255")
        return v

    @field_validator('public_inputs')
    @classmethod
    def validate_public_inputs(cls, v):
        """Exactly two inputs, 32 byte values each."""
        if len(v) != 2:
            raise ValueError("Expected exactly 2 public inputs")
        for i, item in enumerate(v):
            if len(item) != FIELD_ELEMENT_BYTES:
                raise ValueError(f"Public input {i} must be {FIELD_ELEMENT_BYTES} bytes, got {len(item)}")
            if any(not 0 <= b <= 255 for b in item):
                raise ValueError(f"Public input {i} entries must be byte values 0-255")
        return v

    @classmethod
    def from_bytes(cls, proof: bytes, public_inputs: List[bytes]) -> "VerifyProofRequest":
        return cls(proof=list(proof), public_inputs=[list(item) for item in public_inputs])


class MemberEntry(BaseModel):
    """A member record as shown in a lineage view."""
    id: str = Field(..., description="Internal record id")
    public_id: Optional[str] = Field(default=None, description="Public record id")
    first_name: str = Field(default="", description="First name")
    last_name: str = Field(default="", description="Last name")
    full_name: str = Field(default="", description="First and last name")
    age: Optional[str] = Field(default=None, description="Age")
    email: Optional[str] = Field(default=None, description="Email address")
    address: Optional[str] = Field(default=None, description="Postal address")
    contact_number: Optional[str] = Field(default=None, description="Contact number")
    relationship: Optional[str] = Field(default=None, description="Relation to the group")
    is_group_head: bool = Field(default=False, description="Whether the record heads its group")

    @classmethod
    def from_record(cls, record: "MemberRecord") -> "MemberEntry":
        return cls(
            id=record.id,
            public_id=record.public_id,
            first_name=record.first_name,
            last_name=record.last_name,
            full_name=record.full_name,
            age=record.age,
            email=record.email,
            address=record.address,
            contact_number=record.contact_number,
            relationship=record.relationship,
            is_group_head=record.is_group_head,
        )


class AncestorEntry(BaseModel):
    """One group node of the ancestor chain."""
    id: str = Field(..., description="Internal node id")
    public_id: Optional[str] = Field(default=None, description="Public node id")
    name: str = Field(default="", description="Group name")
    location: str = Field(default="", description="Group location")
    role: Optional[str] = Field(default=None, description="Role or relationship label of the group")
    members: List[MemberEntry] = Field(default_factory=list, description="Member records of the group")

    @classmethod
    def from_node(cls, node: "LineageNode", members: Optional[List["MemberRecord"]] = None) -> "AncestorEntry":
        return cls(
            id=node.id,
            public_id=node.public_id,
            name=node.name,
            location=node.location,
            role=node.role,
            members=[MemberEntry.from_record(m) for m in members or []],
        )


class LineageResponse(BaseModel):
    """
    Lineage view of one record.

    Attributes:
        target: The resolved record
        ancestor_chain: Group nodes, root first, ending at the target's group
        siblings: Other records of the target's group
        cycle_detected: The walk stopped on a repeated node
        truncated: The walk stopped at its depth limit
    """
    target: MemberEntry = Field(..., description="Resolved record")
    ancestor_chain: List[AncestorEntry] = Field(default_factory=list, description="Ancestors, root first")
    siblings: List[MemberEntry] = Field(default_factory=list, description="Other records of the same group")
    cycle_detected: bool = Field(default=False, description="Cycle guard fired during the walk")
    truncated: bool = Field(default=False, description="Walk hit its depth limit")

    @classmethod
    def from_view(cls, view: "LineageView") -> "LineageResponse":
        return cls(
            target=MemberEntry.from_record(view.target),
            ancestor_chain=[AncestorEntry.from_node(n, view.members.get(n.id)) for n in view.ancestor_chain],
            siblings=[MemberEntry.from_record(s) for s in view.siblings],
            cycle_detected=view.cycle_detected,
            truncated=view.truncated,
        )
