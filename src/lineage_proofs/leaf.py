"""
Leaf records: the (ancestor, relation, descendant) facts the tree commits to.
"""

import logging
from dataclasses import dataclass, asdict
from typing import Dict, Iterable, List

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeafRecord:
    """One provable fact: ``descendant_id`` has ``relation`` to ``ancestor_id``.

    Field order is part of the circuit contract and must not be permuted.
    """
    ancestor_id: str
    relation: str
    descendant_id: str

    def is_complete(self) -> bool:
        return all(isinstance(v, str) and v != "" for v in (self.ancestor_id, self.relation, self.descendant_id))

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def filter_leaf_records(records: Iterable[LeafRecord]) -> List[LeafRecord]:
    """
    Drop records with an empty field, preserving order.

    Incomplete records are excluded from the candidate set rather than
    failing the whole build.
    """
    kept = []
    skipped = 0
    for record in records:
        if record.is_complete():
            kept.append(record)
        else:
            skipped += 1
            logger.debug(f"Excluding incomplete leaf record: {record}")
    if skipped:
        logger.warning(f"Excluded {skipped} incomplete record(s) from the Merkle leaf set")
    return kept
