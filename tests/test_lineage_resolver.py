"""
Lineage Resolver Tests

Unit tests for loading record exports, walking ancestor chains, deriving
siblings and selecting proof triples.
"""

import unittest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from lineage_proofs.errors import InvalidInputError, InvalidStateError, NotFoundError
from lineage_proofs.leaf import LeafRecord
from lineage_proofs.lineage import (
    CITIZENSHIP,
    LINEAGE,
    TREATMENT,
    InMemoryLineageStore,
    LineageNode,
    LineageResolver,
    MemberRecord,
    get_family,
    load_records_data,
    load_records_file,
)

DATA_DIR = os.path.join(os.path.dirname(__file__), 'data')
LINEAGE_FILE = os.path.join(DATA_DIR, 'lineage_records.json')
TREATMENT_FILE = os.path.join(DATA_DIR, 'treatment_records.json')


def chain_store(length, cycle=False):
    """Store with a single parent chain n0 <- n1 <- ... and one record on the last node."""
    nodes = []
    for i in range(length):
        parent = f"n{i - 1}" if i > 0 else (f"n{length - 1}" if cycle else None)
        nodes.append(LineageNode(id=f"n{i}", public_id=f"G{i}", name=f"Group {i}", parent_id=parent))
    records = [MemberRecord(id="r", public_id="R", relationship="child", group_id=f"n{length - 1}")]
    return InMemoryLineageStore(nodes, records)


class TestLoadRecords(unittest.TestCase):
    """Tests for turning record exports into a store."""

    def test_load_lineage_file(self):
        store = load_records_file(LINEAGE_FILE, LINEAGE)
        self.assertEqual(len(store), 6)
        self.assertEqual(len(store.nodes), 3)

        record = store.find_record_by_public_id("CIT-001")
        self.assertEqual(record.first_name, "Chinedu")
        self.assertEqual(record.relationship, "father")
        self.assertTrue(record.is_group_head)
        self.assertEqual(record.group_id, "n-leaf")

        mid = store.find_node("n-mid")
        self.assertEqual(mid.public_id, "FAM-MID")
        self.assertEqual(mid.parent_id, "n-root")
        self.assertEqual(mid.role, "branch")

    def test_load_treatment_file(self):
        store = load_records_file(TREATMENT_FILE, TREATMENT)
        record = store.find_record_by_public_id("PAT-1")
        self.assertEqual(record.relationship, "surgery")
        self.assertEqual(store.find_node(record.group_id).public_id, "HOSP-2")
        self.assertEqual(store.find_node("h-2").parent_id, "h-1")

    def test_citizenship_aliases(self):
        data = {
            "nodes": [{"countryId": "NG", "name": "Nigeria"}],
            "records": [{"citizenId": "C-1", "relationship": "citizen", "parentCountryId": "NG"}],
        }
        store = load_records_data(data, CITIZENSHIP)
        record = store.find_record("C-1", "citizen")
        self.assertIsNotNone(record)
        self.assertEqual(store.find_node(record.group_id).public_id, "NG")

    def test_duplicate_group_rejected(self):
        data = {"nodes": [{"familyId": "F"}, {"familyId": "F"}], "records": []}
        with self.assertRaises(InvalidInputError):
            load_records_data(data, LINEAGE)

    def test_duplicate_record_rejected(self):
        data = {
            "nodes": [{"familyId": "F"}],
            "records": [
                {"citizenId": "C", "relationship": "son", "parentFamilyId": "F"},
                {"citizenId": "C", "relationship": "son", "parentFamilyId": "F"},
            ],
        }
        with self.assertRaises(InvalidInputError):
            load_records_data(data, LINEAGE)

    def test_dangling_parent_rejected(self):
        data = {"nodes": [{"familyId": "F", "parentFamilyId": "MISSING"}], "records": []}
        with self.assertRaises(InvalidInputError):
            load_records_data(data, LINEAGE)

    def test_dangling_group_rejected(self):
        data = {"nodes": [], "records": [{"citizenId": "C", "parentFamilyId": "MISSING"}]}
        with self.assertRaises(InvalidInputError):
            load_records_data(data, LINEAGE)

    def test_unknown_family(self):
        self.assertIs(get_family("treatment"), TREATMENT)
        with self.assertRaises(InvalidInputError):
            get_family("pets")


class TestResolveTarget(unittest.TestCase):
    """Tests for resolve_target on the lineage fixture."""

    def setUp(self):
        self.store = load_records_file(LINEAGE_FILE, LINEAGE)
        self.resolver = LineageResolver(self.store, LINEAGE, preload_depth=3, max_depth=100)

    def test_unknown_identifier(self):
        with self.assertRaises(NotFoundError) as ctx:
            self.resolver.resolve_target("NOBODY")
        self.assertEqual(ctx.exception.code, "NOT_FOUND")

    def test_two_ancestors_root_first(self):
        view = self.resolver.resolve_target("CIT-010")
        self.assertEqual([n.public_id for n in view.ancestor_chain], ["FAM-ROOT", "FAM-MID"])
        self.assertEqual(view.root.public_id, "FAM-ROOT")
        self.assertFalse(view.cycle_detected)
        self.assertFalse(view.truncated)

    def test_three_ancestors(self):
        view = self.resolver.resolve_target("CIT-002")
        self.assertEqual(view.depth, 3)
        self.assertEqual(view.ancestor_chain[-1].public_id, "FAM-LEAF")

    def test_root_record(self):
        view = self.resolver.resolve_target("CIT-020")
        self.assertEqual([n.public_id for n in view.ancestor_chain], ["FAM-ROOT"])

    def test_siblings_exclude_target(self):
        view = self.resolver.resolve_target("CIT-002")
        self.assertEqual(sorted(s.public_id for s in view.siblings), ["CIT-001", "CIT-003"])

    def test_members_per_chain_entry(self):
        view = self.resolver.resolve_target("CIT-002")
        self.assertEqual([m.public_id for m in view.members["n-root"]], ["CIT-020"])
        self.assertEqual(len(view.members["n-leaf"]), 3)

    def test_members_can_be_skipped(self):
        resolver = LineageResolver(self.store, LINEAGE, include_members=False)
        self.assertEqual(resolver.resolve_target("CIT-002").members, {})

    def test_group_identifier_resolves_to_head(self):
        view = self.resolver.resolve_target("FAM-LEAF")
        self.assertEqual(view.target.public_id, "CIT-001")

    def test_group_identifier_without_head_uses_first_member(self):
        view = self.resolver.resolve_target("FAM-MID")
        self.assertEqual(view.target.public_id, "CIT-010")

    def test_group_fallback_can_be_disabled(self):
        resolver = LineageResolver(self.store, LINEAGE, resolve_groups=False)
        with self.assertRaises(NotFoundError):
            resolver.resolve_target("FAM-LEAF")

    def test_empty_group_searches_descendants(self):
        data = {
            "nodes": [
                {"familyId": "TOP"},
                {"familyId": "EMPTY", "parentFamilyId": "TOP"},
                {"familyId": "FULL", "parentFamilyId": "EMPTY"},
            ],
            "records": [{"citizenId": "DEEP", "relationship": "son", "parentFamilyId": "FULL"}],
        }
        resolver = LineageResolver(load_records_data(data, LINEAGE), LINEAGE)
        view = resolver.resolve_target("TOP")
        self.assertEqual(view.target.public_id, "DEEP")
        self.assertEqual([n.public_id for n in view.ancestor_chain], ["TOP", "EMPTY", "FULL"])

    def test_record_without_group(self):
        store = InMemoryLineageStore([], [MemberRecord(id="r", public_id="LONE", relationship="x", group_id=None)])
        view = LineageResolver(store, LINEAGE).resolve_target("LONE")
        self.assertEqual(view.ancestor_chain, [])
        self.assertEqual(view.siblings, [])


class TestAncestorWalk(unittest.TestCase):
    """Tests for the bounded, cycle-safe ancestor walk."""

    def test_cycle_terminates(self):
        store = chain_store(4, cycle=True)
        resolver = LineageResolver(store, LINEAGE, preload_depth=2)
        view = resolver.resolve_target("R")
        self.assertTrue(view.cycle_detected)
        self.assertEqual(len(view.ancestor_chain), 4)
        self.assertEqual(len({n.id for n in view.ancestor_chain}), 4)

    def test_self_parent_terminates(self):
        store = InMemoryLineageStore(
            [LineageNode(id="n", public_id="G", parent_id="n")],
            [MemberRecord(id="r", public_id="R", relationship="x", group_id="n")],
        )
        view = LineageResolver(store, LINEAGE).resolve_target("R")
        self.assertTrue(view.cycle_detected)
        self.assertEqual(len(view.ancestor_chain), 1)

    def test_parents_fetched_on_demand(self):
        store = chain_store(6)
        resolver = LineageResolver(store, LINEAGE, preload_depth=1, include_members=False)
        view = resolver.resolve_target("R")
        self.assertEqual([n.public_id for n in view.ancestor_chain], [f"G{i}" for i in range(6)])
        # Each fetch returns the node plus one parent
        self.assertEqual(store.ancestor_fetches, 3)

    def test_deep_preload_single_fetch(self):
        store = chain_store(3)
        resolver = LineageResolver(store, LINEAGE, preload_depth=5, include_members=False)
        resolver.resolve_target("R")
        self.assertEqual(store.ancestor_fetches, 1)

    def test_max_depth_truncates(self):
        store = chain_store(10)
        resolver = LineageResolver(store, LINEAGE, max_depth=4)
        view = resolver.resolve_target("R")
        self.assertTrue(view.truncated)
        self.assertEqual([n.public_id for n in view.ancestor_chain], ["G6", "G7", "G8", "G9"])

    def test_dangling_parent_stops_walk(self):
        store = InMemoryLineageStore(
            [LineageNode(id="n", public_id="G", parent_id="gone")],
            [MemberRecord(id="r", public_id="R", relationship="x", group_id="n")],
        )
        view = LineageResolver(store, LINEAGE).resolve_target("R")
        self.assertEqual([n.id for n in view.ancestor_chain], ["n"])

    def test_dangling_group_is_invalid_state(self):
        store = InMemoryLineageStore([], [MemberRecord(id="r", public_id="R", relationship="x", group_id="ghost")])
        with self.assertRaises(InvalidStateError) as ctx:
            LineageResolver(store, LINEAGE).resolve_target("R")
        self.assertEqual(ctx.exception.details["node_id"], "ghost")

    def test_invalid_bounds(self):
        store = chain_store(1)
        with self.assertRaises(ValueError):
            LineageResolver(store, LINEAGE, preload_depth=0)
        with self.assertRaises(ValueError):
            LineageResolver(store, LINEAGE, max_depth=0)


class TestSelectProofTriple(unittest.TestCase):
    """Tests for picking the leaf a proof is built for."""

    def setUp(self):
        self.store = load_records_file(LINEAGE_FILE, LINEAGE)
        self.resolver = LineageResolver(self.store, LINEAGE)

    def test_triple_uses_group_public_id(self):
        triple = self.resolver.select_proof_triple("CIT-002", "daughter")
        self.assertEqual(triple, LeafRecord("FAM-LEAF", "daughter", "CIT-002"))

    def test_wrong_relationship(self):
        with self.assertRaises(NotFoundError):
            self.resolver.select_proof_triple("CIT-002", "son")

    def test_unknown_record(self):
        with self.assertRaises(NotFoundError):
            self.resolver.select_proof_triple("CIT-404", "son")

    def test_empty_arguments(self):
        with self.assertRaises(InvalidInputError):
            self.resolver.select_proof_triple("", "son")
        with self.assertRaises(InvalidInputError):
            self.resolver.select_proof_triple("CIT-002", "")

    def test_missing_group(self):
        store = InMemoryLineageStore([], [MemberRecord(id="r", public_id="R", relationship="son", group_id=None)])
        with self.assertRaises(InvalidStateError):
            LineageResolver(store, LINEAGE).select_proof_triple("R", "son")

    def test_group_without_public_id(self):
        store = InMemoryLineageStore(
            [LineageNode(id="n", public_id=None)],
            [MemberRecord(id="r", public_id="R", relationship="son", group_id="n")],
        )
        with self.assertRaises(InvalidStateError) as ctx:
            LineageResolver(store, LINEAGE).select_proof_triple("R", "son")
        self.assertEqual(ctx.exception.code, "INVALID_STATE")

    def test_triple_for_record_identifier(self):
        triple = self.resolver.select_proof_triple_for("CIT-003")
        self.assertEqual(triple, LeafRecord("FAM-LEAF", "son", "CIT-003"))

    def test_triple_for_group_uses_head(self):
        triple = self.resolver.select_proof_triple_for("FAM-LEAF")
        self.assertEqual(triple, LeafRecord("FAM-LEAF", "father", "CIT-001"))

    def test_triple_for_group_without_head(self):
        triple = self.resolver.select_proof_triple_for("FAM-MID")
        self.assertEqual(triple, LeafRecord("FAM-MID", "mother", "CIT-010"))

    def test_triple_for_unknown_identifier(self):
        with self.assertRaises(NotFoundError):
            self.resolver.select_proof_triple_for("NOBODY")

    def test_triple_for_record_without_relationship(self):
        with self.assertRaises(InvalidStateError):
            self.resolver.select_proof_triple_for("CIT-099")


if __name__ == '__main__':
    unittest.main(verbosity=2)
