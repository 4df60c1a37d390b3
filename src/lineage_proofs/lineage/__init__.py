"""
Lineage Graph

Group-node hierarchy, member records, the per-family field mappings, the
persistence interface and the resolver that walks it.
"""

from .types import LineageNode, MemberRecord, NodeWithChildren
from .families import (
    RecordFamily,
    LINEAGE,
    CITIZENSHIP,
    TREATMENT,
    FAMILIES,
    get_family,
)
from .store import (
    LineageStore,
    InMemoryLineageStore,
    load_records_data,
    load_records_file,
)
from .resolver import LineageResolver, LineageView, AncestorWalk

__all__ = [
    # Types
    'LineageNode',
    'MemberRecord',
    'NodeWithChildren',

    # Families
    'RecordFamily',
    'LINEAGE',
    'CITIZENSHIP',
    'TREATMENT',
    'FAMILIES',
    'get_family',

    # Persistence
    'LineageStore',
    'InMemoryLineageStore',
    'load_records_data',
    'load_records_file',

    # Resolver
    'LineageResolver',
    'LineageView',
    'AncestorWalk',
]
