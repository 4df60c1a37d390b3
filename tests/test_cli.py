"""
CLI Tests

Exercises the click commands end to end with the local SHA-256 oracle.
"""

import json
import os
import sys
import tempfile
import unittest

from click.testing import CliRunner

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from lineage_proofs.cli import cli

DATA_DIR = os.path.join(os.path.dirname(__file__), 'data')
LINEAGE_FILE = os.path.join(DATA_DIR, 'lineage_records.json')


class TestCLI(unittest.TestCase):
    """Tests for the lineage-proofs command group."""

    def setUp(self):
        self.runner = CliRunner()
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

    def run_cli(self, *args):
        return self.runner.invoke(cli, ["--oracle", "sha256", *args])

    def test_prove_and_verify(self):
        payload_file = os.path.join(self.tmp.name, "payload.json")
        result = self.run_cli(
            "prove", "CIT-002", "daughter",
            "--records-file", LINEAGE_FILE,
            "--family", "lineage",
            "--output", payload_file,
        )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Lineage Proof Inputs", result.output)

        with open(payload_file) as f:
            payload = json.load(f)
        self.assertEqual(payload["ancestor_id"], "FAM-LEAF")
        self.assertEqual(payload["merkle_leaf_index"], 1)
        self.assertEqual(len(payload["merkle_path"]), 3)

        result = self.run_cli("verify", payload_file)
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Proof is valid", result.output)

    def test_verify_rejects_tampered_payload(self):
        payload_file = os.path.join(self.tmp.name, "payload.json")
        self.run_cli("prove", "CIT-001", "father", "--records-file", LINEAGE_FILE, "--output", payload_file)
        with open(payload_file) as f:
            payload = json.load(f)
        payload["descendant_id"] = "CIT-003"
        with open(payload_file, "w") as f:
            json.dump(payload, f)

        result = self.run_cli("verify", payload_file)
        self.assertEqual(result.exit_code, 1)
        self.assertIn("does not match", result.output)

    def test_prove_unknown_record(self):
        result = self.run_cli("prove", "CIT-404", "son", "--records-file", LINEAGE_FILE)
        self.assertNotEqual(result.exit_code, 0)
        self.assertIn("NOT_FOUND", result.output)

    def test_prove_ancestor_mismatch(self):
        result = self.run_cli(
            "prove", "CIT-002", "daughter", "--records-file", LINEAGE_FILE, "--ancestor-id", "FAM-ROOT"
        )
        self.assertNotEqual(result.exit_code, 0)
        self.assertIn("INVALID_INPUT", result.output)

    def test_prove_group_identifier(self):
        payload_file = os.path.join(self.tmp.name, "payload.json")
        result = self.run_cli("prove", "FAM-LEAF", "--records-file", LINEAGE_FILE, "--output", payload_file)
        self.assertEqual(result.exit_code, 0, result.output)
        with open(payload_file) as f:
            payload = json.load(f)
        self.assertEqual(payload["descendant_id"], "CIT-001")
        self.assertEqual(payload["relation"], "father")
        self.assertEqual(payload["merkle_leaf_index"], 0)

    def test_prove_record_without_relationship_argument(self):
        result = self.run_cli("prove", "CIT-003", "--records-file", LINEAGE_FILE, "--format", "json")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('"son"', result.output)

    def test_prove_unknown_identifier(self):
        result = self.run_cli("prove", "NOBODY", "--records-file", LINEAGE_FILE)
        self.assertNotEqual(result.exit_code, 0)
        self.assertIn("[NOT_FOUND]", result.output)

    def test_lineage_table(self):
        result = self.run_cli("lineage", "CIT-002", "--records-file", LINEAGE_FILE)
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("FAM-ROOT", result.output)
        self.assertIn("CIT-003", result.output)
        self.assertIn("Ada Adeyemi", result.output)

    def test_lineage_json(self):
        result = self.run_cli("lineage", "CIT-010", "--records-file", LINEAGE_FILE, "--format", "json")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('"FAM-MID"', result.output)

    def test_inspect(self):
        result = self.run_cli("inspect", LINEAGE_FILE)
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Record Set Summary", result.output)

    def test_unknown_oracle(self):
        result = self.runner.invoke(cli, ["--oracle", "md5", "inspect", LINEAGE_FILE])
        self.assertNotEqual(result.exit_code, 0)

    def test_health_with_local_oracle(self):
        env = {"ZKP_SERVICE_URL": ""}
        result = self.runner.invoke(cli, ["--oracle", "sha256", "health"], env=env)
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Health Check", result.output)


if __name__ == '__main__':
    unittest.main(verbosity=2)
