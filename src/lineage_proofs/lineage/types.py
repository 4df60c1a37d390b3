"""
Lineage graph types.

Group nodes form a self-referential hierarchy: each node points at most at
one parent through ``parent_id`` (a lookup key, not an owned object). Member
records hang off a group node through ``group_id``. Both are read-only here.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class LineageNode:
    """A group in the hierarchy (family, country, hospital)."""
    id: str
    public_id: Optional[str]
    name: str = ""
    location: str = ""
    role: Optional[str] = None
    parent_id: Optional[str] = None


@dataclass(frozen=True)
class MemberRecord:
    """An individual attached to a group node."""
    id: str
    public_id: Optional[str]
    relationship: Optional[str]
    group_id: Optional[str]
    first_name: str = ""
    last_name: str = ""
    is_group_head: bool = False
    age: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    contact_number: Optional[str] = None

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


@dataclass
class NodeWithChildren:
    """A node with its direct member records and direct child nodes loaded."""
    node: LineageNode
    members: List[MemberRecord] = field(default_factory=list)
    child_nodes: List[LineageNode] = field(default_factory=list)
