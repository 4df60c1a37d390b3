"""
Hash Oracle Package

Poseidon-style field hashing used for leaf commitments and tree nodes.

Usage:
    from lineage_proofs.oracle import create_oracle

    oracle = create_oracle("poseidon-service")
    oracle.setup()
    node = oracle.hash2(left, right)
"""

from typing import Optional

from .. import config
from ..errors import InvalidInputError
from .base import HashOracle
from .poseidon_service import PoseidonServiceOracle
from .sha256_field import Sha256FieldOracle

ORACLES = {
    PoseidonServiceOracle.name: PoseidonServiceOracle,
    Sha256FieldOracle.name: Sha256FieldOracle,
}


def create_oracle(name: Optional[str] = None, **kwargs) -> HashOracle:
    """
    Build a hash oracle by name.

    Args:
        name: "poseidon-service" or "sha256". If None, uses HASH_ORACLE.
        **kwargs: Passed to the oracle constructor

    Raises:
        InvalidInputError: If the name is unknown
    """
    name = name or config.get_settings().hash_oracle
    try:
        oracle_cls = ORACLES[name]
    except KeyError:
        raise InvalidInputError(
            f"Unknown hash oracle {name!r}; choose one of {sorted(ORACLES)}"
        ) from None
    return oracle_cls(**kwargs)


__all__ = [
    'HashOracle',
    'PoseidonServiceOracle',
    'Sha256FieldOracle',
    'create_oracle',
    'ORACLES',
]
