"""
API Models Package

Request and response models for the proving-service boundary and the lineage
view. It includes Pydantic models for validation and serialization of:

- Proving requests (triple, leaf index, Merkle path and root)
- Verify requests (proof bytes and public inputs)
- Lineage responses (target, ancestor chain, siblings)
- Error and health responses

Usage:
    from lineage_proofs.models import ProofRequestPayload

    payload = ProofRequestPayload.from_proof(record, proof)
"""

from .api_models import (
    ProofRequestPayload,
    VerifyProofRequest,
    MemberEntry,
    AncestorEntry,
    LineageResponse,
    ErrorResponse,
    HealthResponse,
)

__all__ = [
    'ProofRequestPayload',
    'VerifyProofRequest',
    'MemberEntry',
    'AncestorEntry',
    'LineageResponse',
    'ErrorResponse',
    'HealthResponse',
]
