"""
Entity families.

The same Merkle/lineage pipeline serves every entity family. A RecordFamily
says how raw exports of that family name their fields and turns a record plus
its group into the leaf triple the circuit commits to.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from ..errors import InvalidInputError
from ..leaf import LeafRecord
from .types import LineageNode, MemberRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordFamily:
    """
    Field mapping for one entity family.

    Attributes:
        name: Registry key ("lineage", "citizenship", "treatment")
        group_label: Human name of a group node, used in messages
        relation_label: Human name of the relation field
        node_aliases: Generic node field -> snake_case key in raw exports
        record_aliases: Generic record field -> snake_case key in raw exports
    """
    name: str
    group_label: str
    relation_label: str = "relationship"
    node_aliases: Mapping[str, str] = field(default_factory=dict)
    record_aliases: Mapping[str, str] = field(default_factory=dict)

    def read_node_field(self, raw: Dict[str, Any], name: str, default: Any = None) -> Any:
        return _read(raw, self.node_aliases.get(name), name, default)

    def read_record_field(self, raw: Dict[str, Any], name: str, default: Any = None) -> Any:
        return _read(raw, self.record_aliases.get(name), name, default)

    def to_leaf_triple(self, record: MemberRecord, group: Optional[LineageNode]) -> Optional[LeafRecord]:
        """
        Map a record and its group to (ancestor, relation, descendant).

        Returns:
            The leaf record, or None when any of the three fields would be empty
        """
        if group is None or not group.public_id:
            logger.debug(f"Record {record.id} has no {self.group_label} with a public id; excluded")
            return None
        if not record.relationship or not record.public_id:
            logger.debug(f"Record {record.id} is missing {self.relation_label} or public id; excluded")
            return None
        return LeafRecord(
            ancestor_id=str(group.public_id),
            relation=str(record.relationship),
            descendant_id=str(record.public_id),
        )


def _read(raw: Dict[str, Any], alias: Optional[str], name: str, default: Any) -> Any:
    if alias is not None and alias in raw:
        return raw[alias]
    return raw.get(name, default)


LINEAGE = RecordFamily(
    name="lineage",
    group_label="family",
    node_aliases={
        "public_id": "family_id",
        "parent_public_id": "parent_family_id",
        "role": "relationship",
    },
    record_aliases={
        "public_id": "citizen_id",
        "group_public_id": "parent_family_id",
        "is_group_head": "is_family_head",
    },
)

CITIZENSHIP = RecordFamily(
    name="citizenship",
    group_label="country",
    node_aliases={
        "public_id": "country_id",
        "parent_public_id": "parent_country_id",
        "role": "relationship",
    },
    record_aliases={
        "public_id": "citizen_id",
        "group_public_id": "parent_country_id",
    },
)

TREATMENT = RecordFamily(
    name="treatment",
    group_label="hospital",
    relation_label="treatment",
    node_aliases={
        "public_id": "hospital_id",
        "parent_public_id": "parent_hospital_id",
    },
    record_aliases={
        "public_id": "patient_id",
        "relationship": "treatment",
        "group_public_id": "hospital_id",
    },
)

FAMILIES = {family.name: family for family in (LINEAGE, CITIZENSHIP, TREATMENT)}


def get_family(name: str) -> RecordFamily:
    """Look up a registered family by name."""
    try:
        return FAMILIES[name]
    except KeyError:
        raise InvalidInputError(
            f"Unknown record family {name!r}; choose one of {sorted(FAMILIES)}"
        ) from None
