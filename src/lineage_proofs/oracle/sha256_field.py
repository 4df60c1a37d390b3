"""
Local SHA-256 field oracle.

A deterministic stand-in for the Poseidon service: SHA-256 over a domain tag,
the arity, and the 32-byte big-endian inputs, reduced modulo the field prime.
Good for offline development and tests. Roots it produces are NOT accepted by
the proving circuit.
"""

import logging
from hashlib import sha256
from typing import Sequence

from ..constants import FIELD_MODULUS
from ..field import FieldElement, to_bytes32
from .base import HashOracle

logger = logging.getLogger(__name__)

DOMAIN_TAG = b"lineage-proofs/sha256-field/v1"


class Sha256FieldOracle(HashOracle):
    """SHA-256 reduced mod p, domain separated by arity."""

    name = "sha256"
    circuit_compatible = False

    def setup(self) -> None:
        logger.info("Using local SHA-256 field oracle; roots are not circuit compatible")

    def hash(self, inputs: Sequence[FieldElement]) -> FieldElement:
        elements = self._check_inputs(inputs)
        h = sha256()
        h.update(DOMAIN_TAG)
        h.update(bytes([len(elements)]))
        for element in elements:
            h.update(to_bytes32(element))
        return int.from_bytes(h.digest(), "big") % FIELD_MODULUS
