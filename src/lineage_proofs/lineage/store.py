"""
Lineage Store

The persistence collaborator the resolver reads through. The resolver only
needs the operations on ``LineageStore``; ``InMemoryLineageStore`` serves them
from a record export loaded from JSON. Every call returns fully materialized
lists, no paging.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from ..errors import InvalidInputError
from ..utils import camel_to_snake
from .families import RecordFamily
from .types import LineageNode, MemberRecord, NodeWithChildren

logger = logging.getLogger(__name__)


class LineageStore(ABC):
    """Read-only access to group nodes and member records."""

    @abstractmethod
    def find_record_by_public_id(self, public_id: str) -> Optional[MemberRecord]:
        """Find a member record by its public identifier."""

    @abstractmethod
    def find_all_records(self) -> List[MemberRecord]:
        """All member records, in a stable order, for Merkle set construction."""

    @abstractmethod
    def find_node(self, node_id: str) -> Optional[LineageNode]:
        """Find a group node by internal id."""

    @abstractmethod
    def find_node_by_public_id(self, public_id: str) -> Optional[NodeWithChildren]:
        """Find a group node by public identifier, with its children loaded."""

    @abstractmethod
    def find_node_with_children(self, node_id: str) -> Optional[NodeWithChildren]:
        """Find a group node by internal id, with its children loaded."""

    @abstractmethod
    def find_node_with_ancestors(self, node_id: str, depth: int) -> List[LineageNode]:
        """
        Find a node and up to ``depth`` of its ancestors.

        Returns:
            ``[node, parent, grandparent, ...]``, empty if the node does not exist
        """

    def find_record(self, public_id: str, relationship: str) -> Optional[MemberRecord]:
        """Find the record with this public identifier and relationship."""
        record = self.find_record_by_public_id(public_id)
        if record is not None and record.relationship == relationship:
            return record
        return None


class InMemoryLineageStore(LineageStore):
    """LineageStore over in-memory nodes and records."""

    def __init__(self, nodes: Iterable[LineageNode] = (), records: Iterable[MemberRecord] = ()):
        self._nodes: Dict[str, LineageNode] = {}
        self._records: List[MemberRecord] = []
        self.ancestor_fetches = 0

        for node in nodes:
            if node.id in self._nodes:
                raise InvalidInputError(f"Duplicate node id {node.id!r}")
            self._nodes[node.id] = node
        for record in records:
            self._records.append(record)

    def __len__(self) -> int:
        return len(self._records)

    @property
    def nodes(self) -> List[LineageNode]:
        return list(self._nodes.values())

    def find_record_by_public_id(self, public_id: str) -> Optional[MemberRecord]:
        for record in self._records:
            if record.public_id is not None and record.public_id == public_id:
                return record
        return None

    def find_all_records(self) -> List[MemberRecord]:
        return list(self._records)

    def find_node(self, node_id: str) -> Optional[LineageNode]:
        return self._nodes.get(node_id)

    def find_node_by_public_id(self, public_id: str) -> Optional[NodeWithChildren]:
        for node in self._nodes.values():
            if node.public_id is not None and node.public_id == public_id:
                return self._with_children(node)
        return None

    def find_node_with_children(self, node_id: str) -> Optional[NodeWithChildren]:
        node = self._nodes.get(node_id)
        return self._with_children(node) if node is not None else None

    def find_node_with_ancestors(self, node_id: str, depth: int) -> List[LineageNode]:
        self.ancestor_fetches += 1
        result: List[LineageNode] = []
        seen = set()
        current = self._nodes.get(node_id)
        while current is not None and current.id not in seen and len(result) <= depth:
            result.append(current)
            seen.add(current.id)
            current = self._nodes.get(current.parent_id) if current.parent_id is not None else None
        return result

    def _with_children(self, node: LineageNode) -> NodeWithChildren:
        return NodeWithChildren(
            node=node,
            members=[r for r in self._records if r.group_id == node.id],
            child_nodes=[n for n in self._nodes.values() if n.parent_id == node.id],
        )


def _snake_keys(raw: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(raw, dict):
        raise InvalidInputError(f"Expected an object, got {type(raw).__name__}")
    return {camel_to_snake(key): value for key, value in raw.items()}


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def load_records_data(data: Dict[str, Any], family: RecordFamily) -> InMemoryLineageStore:
    """
    Build a store from a record export.

    The export is ``{"nodes": [...], "records": [...]}``. Nodes point at their
    parent and records at their group by PUBLIC identifier, using the
    family's field names (e.g. ``parentFamilyId`` for the lineage family).

    Raises:
        InvalidInputError: On duplicate public ids or dangling references
    """
    if not isinstance(data, dict):
        raise InvalidInputError("Record export must be a JSON object")

    raw_nodes = [_snake_keys(n) for n in data.get("nodes", [])]
    raw_records = [_snake_keys(r) for r in data.get("records", [])]

    # Pass 1: assign internal ids and index nodes by public id
    node_ids_by_public: Dict[str, str] = {}
    node_entries = []
    for i, raw in enumerate(raw_nodes):
        node_id = str(raw.get("id", f"node-{i}"))
        public_id = _optional_str(family.read_node_field(raw, "public_id"))
        if public_id is not None:
            if public_id in node_ids_by_public:
                raise InvalidInputError(
                    f"{family.group_label.title()} with ID {public_id} already exists."
                )
            node_ids_by_public[public_id] = node_id
        node_entries.append((node_id, public_id, raw))

    # Pass 2: resolve parent references
    nodes = []
    for node_id, public_id, raw in node_entries:
        parent_public = _optional_str(family.read_node_field(raw, "parent_public_id"))
        parent_id = None
        if parent_public:
            parent_id = node_ids_by_public.get(parent_public)
            if parent_id is None:
                raise InvalidInputError(
                    f"Parent {family.group_label} with ID \"{parent_public}\" not found. Cannot link {public_id}."
                )
        nodes.append(LineageNode(
            id=node_id,
            public_id=public_id,
            name=str(family.read_node_field(raw, "name", "")),
            location=str(family.read_node_field(raw, "location", "")),
            role=_optional_str(family.read_node_field(raw, "role")),
            parent_id=parent_id,
        ))

    records = []
    seen_public = set()
    for i, raw in enumerate(raw_records):
        public_id = _optional_str(family.read_record_field(raw, "public_id"))
        if public_id is not None:
            if public_id in seen_public:
                raise InvalidInputError(f"Record with ID \"{public_id}\" already exists.")
            seen_public.add(public_id)

        group_public = _optional_str(family.read_record_field(raw, "group_public_id"))
        group_id = None
        if group_public:
            group_id = node_ids_by_public.get(group_public)
            if group_id is None:
                raise InvalidInputError(
                    f"Parent {family.group_label} with ID \"{group_public}\" not found for record {public_id}."
                )

        records.append(MemberRecord(
            id=str(raw.get("id", f"record-{i}")),
            public_id=public_id,
            relationship=_optional_str(family.read_record_field(raw, "relationship")),
            group_id=group_id,
            first_name=str(family.read_record_field(raw, "first_name", "")),
            last_name=str(family.read_record_field(raw, "last_name", "")),
            is_group_head=bool(family.read_record_field(raw, "is_group_head", False)),
            age=_optional_str(family.read_record_field(raw, "age")),
            email=_optional_str(family.read_record_field(raw, "email")),
            address=_optional_str(family.read_record_field(raw, "address")),
            contact_number=_optional_str(family.read_record_field(raw, "contact_number")),
        ))

    logger.info(f"Loaded {len(nodes)} {family.group_label} node(s) and {len(records)} record(s)")
    return InMemoryLineageStore(nodes, records)


def load_records_file(path: str, family: RecordFamily) -> InMemoryLineageStore:
    """Load a record export JSON file into an in-memory store."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return load_records_data(data, family)
