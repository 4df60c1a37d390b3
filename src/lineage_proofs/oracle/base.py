"""
Hash Oracle interface.

The oracle is the Poseidon-style hash the proving circuit uses for leaf
commitments (arity 3) and internal tree nodes (arity 2). Implementations must
be the exact primitive the circuit was built with; any divergence produces
proofs that verify locally and fail in the circuit.
"""

from abc import ABC, abstractmethod
from typing import List, Sequence

from ..constants import LEAF_ARITY, NODE_ARITY
from ..errors import InvalidInputError
from ..field import FieldElement, to_field_element


class HashOracle(ABC):
    """Field-element hash with an explicit one-time setup step."""

    name = "abstract"
    circuit_compatible = False

    def setup(self) -> None:
        """
        Prepare the oracle for use.

        Called once by the engine before any hashing. The default has nothing
        to prepare; remote oracles use it to probe their service.
        """

    @abstractmethod
    def hash(self, inputs: Sequence[FieldElement]) -> FieldElement:
        """Hash a tuple of field elements to a single field element."""

    def hash2(self, left: FieldElement, right: FieldElement) -> FieldElement:
        return self.hash([left, right])

    def hash3(self, a: FieldElement, b: FieldElement, c: FieldElement) -> FieldElement:
        return self.hash([a, b, c])

    def health_check(self) -> bool:
        return True

    @staticmethod
    def _check_inputs(inputs: Sequence[FieldElement]) -> List[FieldElement]:
        if len(inputs) not in (NODE_ARITY, LEAF_ARITY):
            raise InvalidInputError(
                f"Hash oracle supports arity {NODE_ARITY} or {LEAF_ARITY}, got {len(inputs)}"
            )
        return [to_field_element(v) for v in inputs]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
