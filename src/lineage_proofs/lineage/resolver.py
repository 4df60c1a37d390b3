"""
Lineage Resolver

Resolves a public identifier to its record, walks the parent links of the
record's group up to the root, and derives the record's siblings. Also picks
the (ancestor, relation, descendant) triple a proof is built for.

The ancestor walk is iterative over an arena of nodes keyed by internal id.
Parent levels are fetched from the store ``preload_depth`` at a time and only
when the walk runs past what is already in the arena.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..config import get_settings
from ..errors import InvalidInputError, InvalidStateError, NotFoundError
from ..leaf import LeafRecord
from .families import LINEAGE, RecordFamily
from .store import LineageStore
from .types import LineageNode, MemberRecord

logger = logging.getLogger(__name__)


@dataclass
class LineageView:
    """
    Result of resolving one identifier.

    Attributes:
        target: The resolved member record
        ancestor_chain: Group nodes, root first, ending at the target's own group
        siblings: Other records of the target's group
        members: Member records per chain node, keyed by node id
        cycle_detected: True if the walk stopped on a repeated node
        truncated: True if the walk stopped at ``max_depth``
    """
    target: MemberRecord
    ancestor_chain: List[LineageNode] = field(default_factory=list)
    siblings: List[MemberRecord] = field(default_factory=list)
    members: Dict[str, List[MemberRecord]] = field(default_factory=dict)
    cycle_detected: bool = False
    truncated: bool = False

    @property
    def depth(self) -> int:
        return len(self.ancestor_chain)

    @property
    def root(self) -> Optional[LineageNode]:
        return self.ancestor_chain[0] if self.ancestor_chain else None


@dataclass
class AncestorWalk:
    """Outcome of one ancestor walk; ``chain`` is root-first."""
    chain: List[LineageNode]
    cycle_detected: bool = False
    truncated: bool = False


class LineageResolver:
    """
    Read-only lineage queries over a LineageStore.

    Args:
        store: Persistence collaborator
        family: Entity family the store was loaded with
        preload_depth: Parent levels requested per store fetch
        max_depth: Upper bound on the number of chain entries
        resolve_groups: Fall back to group public ids in ``resolve_target``
        include_members: Load member lists for every chain entry
    """

    def __init__(
        self,
        store: LineageStore,
        family: RecordFamily = LINEAGE,
        preload_depth: Optional[int] = None,
        max_depth: Optional[int] = None,
        resolve_groups: bool = True,
        include_members: bool = True,
    ):
        settings = get_settings()
        self.store = store
        self.family = family
        self.preload_depth = preload_depth if preload_depth is not None else settings.preload_depth
        self.max_depth = max_depth if max_depth is not None else settings.max_lineage_depth
        self.resolve_groups = resolve_groups
        self.include_members = include_members

        if self.preload_depth < 1:
            raise ValueError("preload_depth must be at least 1")
        if self.max_depth < 1:
            raise ValueError("max_depth must be at least 1")

    def resolve_target(self, identifier: str) -> LineageView:
        """
        Resolve an identifier to its record, ancestor chain and siblings.

        Args:
            identifier: Record public id (or group public id, see ``resolve_groups``)

        Returns:
            LineageView with the chain ordered root-first

        Raises:
            NotFoundError: If nothing matches the identifier
        """
        target = self._resolve_identifier(identifier)
        logger.info(f"Resolved {identifier!r} to record {target.id}")

        view = LineageView(target=target)
        if target.group_id is None:
            logger.info(f"Record {target.id} has no {self.family.group_label}; no ancestors or siblings")
            return view

        walk = self.walk_ancestors(target.group_id)
        view.ancestor_chain = walk.chain
        view.cycle_detected = walk.cycle_detected
        view.truncated = walk.truncated
        view.siblings = self.find_siblings(target)

        if self.include_members:
            for node in view.ancestor_chain:
                loaded = self.store.find_node_with_children(node.id)
                view.members[node.id] = list(loaded.members) if loaded is not None else []

        logger.info(
            f"Lineage for {target.public_id}: {view.depth} ancestor(s), {len(view.siblings)} sibling(s)"
        )
        return view

    def walk_ancestors(self, start_id: str) -> AncestorWalk:
        """
        Follow parent links from ``start_id`` to the root.

        Stops when a node has no parent, when the next parent was already
        visited, when a parent reference cannot be loaded, or after
        ``max_depth`` nodes.

        Returns:
            The walk, with its chain ordered root-first
        """
        arena: Dict[str, LineageNode] = {}
        visited = set()
        chain: List[LineageNode] = []
        walk = AncestorWalk(chain=chain)

        logger.debug(f"Starting ancestor traversal at node {start_id}")
        current_id: Optional[str] = start_id
        while current_id is not None:
            if current_id in visited:
                logger.warning(f"Cycle in {self.family.group_label} hierarchy at node {current_id}; stopping walk")
                walk.cycle_detected = True
                break
            if len(chain) >= self.max_depth:
                logger.warning(f"Ancestor walk reached max_depth={self.max_depth}; chain truncated")
                walk.truncated = True
                break

            node = arena.get(current_id)
            if node is None:
                for fetched in self.store.find_node_with_ancestors(current_id, self.preload_depth):
                    arena.setdefault(fetched.id, fetched)
                node = arena.get(current_id)
            if node is None:
                if chain:
                    logger.warning(f"Parent reference {current_id} of node {chain[-1].id} does not resolve")
                    break
                raise InvalidStateError(
                    f"{self.family.group_label.title()} {current_id} referenced by the target does not exist",
                    details={"node_id": current_id},
                )

            visited.add(node.id)
            chain.append(node)
            logger.debug(f"Added ancestor {node.public_id} ({node.id}); {len(chain)} so far")
            current_id = node.parent_id

        chain.reverse()
        return walk

    def find_siblings(self, target: MemberRecord) -> List[MemberRecord]:
        """Other records of the target's group, re-fetched with the group."""
        if target.group_id is None:
            return []
        parent = self.store.find_node_with_children(target.group_id)
        if parent is None:
            logger.warning(f"Group {target.group_id} of record {target.id} not found; no siblings")
            return []
        return [member for member in parent.members if member.id != target.id]

    def select_proof_triple(self, descendant_id: str, relationship: str) -> LeafRecord:
        """
        Pick the leaf a proof is built for.

        Args:
            descendant_id: Public id of the record
            relationship: Relation the record must carry

        Returns:
            LeafRecord(ancestor = group public id, relation, descendant)

        Raises:
            InvalidInputError: If either argument is empty
            NotFoundError: If no record matches both arguments
            InvalidStateError: If the record's group is missing or has no public id
        """
        if not descendant_id or not relationship:
            raise InvalidInputError("descendant_id and relationship are required")

        record = self.store.find_record(descendant_id, relationship)
        if record is None:
            raise NotFoundError(
                f"No record found for ID \"{descendant_id}\" with {self.family.relation_label} \"{relationship}\"",
                details={"descendant_id": descendant_id, "relationship": relationship},
            )

        group = self.store.find_node(record.group_id) if record.group_id is not None else None
        if group is None or not group.public_id:
            raise InvalidStateError(
                f"Record \"{descendant_id}\" is not linked to a {self.family.group_label} with a valid id",
                details={"descendant_id": descendant_id},
            )

        logger.info(
            f"Proof target: descendant {descendant_id!r} ({relationship}) -> "
            f"ancestor {self.family.group_label} {group.public_id!r}"
        )
        return LeafRecord(ancestor_id=group.public_id, relation=relationship, descendant_id=descendant_id)

    def select_proof_triple_for(self, identifier: str) -> LeafRecord:
        """
        Pick the proof leaf for a record or group identifier.

        A group resolves to its head record, else its first member. The
        record's stored relationship is the one proven.

        Raises:
            NotFoundError: If nothing matches the identifier
            InvalidStateError: If the resolved record has no relationship
        """
        record = self._resolve_identifier(identifier)
        if not record.public_id or not record.relationship:
            raise InvalidStateError(
                f"Record {record.id} resolved from \"{identifier}\" has no {self.family.relation_label} to prove",
                details={"identifier": identifier, "record_id": record.id},
            )
        return self.select_proof_triple(record.public_id, record.relationship)

    def _resolve_identifier(self, identifier: str) -> MemberRecord:
        if not identifier:
            raise InvalidInputError("identifier is required")

        record = self.store.find_record_by_public_id(identifier)
        if record is not None:
            return record

        if self.resolve_groups:
            group = self.store.find_node_by_public_id(identifier)
            if group is not None:
                record = self._representative_record(group.node.id)
                if record is not None:
                    logger.info(f"{identifier!r} is a {self.family.group_label}; using record {record.id}")
                    return record

        raise NotFoundError(
            f"No record or {self.family.group_label} found for identifier \"{identifier}\"",
            details={"identifier": identifier},
        )

    def _representative_record(self, node_id: str) -> Optional[MemberRecord]:
        """Group head, else first member, else the first record below it depth-first."""
        visited = set()
        stack = [node_id]
        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.add(current)

            loaded = self.store.find_node_with_children(current)
            if loaded is None:
                continue
            if current == node_id:
                for member in loaded.members:
                    if member.is_group_head:
                        return member
            if loaded.members:
                return loaded.members[0]
            # Reversed so the first child is popped first
            stack.extend(child.id for child in reversed(loaded.child_nodes))
        return None
