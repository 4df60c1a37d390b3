"""
Error taxonomy for the commitment engine and lineage resolver.

Every error carries a stable ``code`` so callers can branch on the kind of
failure without parsing messages.
"""

from typing import Any, Dict, Optional


class LineageProofError(Exception):
    """Base class for all domain errors raised by lineage_proofs."""

    code = "LINEAGE_PROOF_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "code": self.code, "details": self.details}


class InvalidInputError(LineageProofError, ValueError):
    """Empty or malformed input offered to the encoder or a public boundary."""

    code = "INVALID_INPUT"


class LeafNotFoundError(LineageProofError):
    """The query record is not a member of the committed set."""

    code = "LEAF_NOT_FOUND"


class NotFoundError(LineageProofError):
    """An identifier could not be resolved to a stored record."""

    code = "NOT_FOUND"


class InvalidStateError(LineageProofError):
    """A stored record lacks a well-formed ancestor link."""

    code = "INVALID_STATE"


class BadPathLengthError(LineageProofError):
    """A proof path does not have exactly MERKLE_PATH_LEN entries. Fatal."""

    code = "BAD_PATH_LENGTH"


class CapacityExceededError(LineageProofError):
    """More real records than the fixed-depth tree can hold. Fatal."""

    code = "CAPACITY_EXCEEDED"


class ProofConstructionError(LineageProofError):
    """A freshly built proof failed its own root recomputation. Fatal."""

    code = "PROOF_CONSTRUCTION"


class OracleError(LineageProofError):
    """The hash oracle failed or returned a malformed digest."""

    code = "HASH_ORACLE_ERROR"


class ProvingServiceError(LineageProofError):
    """The external proving service failed or returned a malformed response."""

    code = "PROVING_SERVICE_ERROR"
