"""
API Package

Service layer tying the lineage resolver and Merkle engine together, and the
client for the external proving service.

Usage:
    from lineage_proofs.api import ProofService

    service = ProofService(store, engine)
    payload = service.prepare_proof_inputs("CIT-002", "father")
"""

from .proving_client import ProvingServiceClient
from .proof_service import ProofService, collect_leaf_records

__all__ = [
    'ProofService',
    'ProvingServiceClient',
    'collect_leaf_records',
]
