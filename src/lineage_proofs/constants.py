"""
Lineage Proof Constants

This module contains the constants shared between the commitment engine and
the external proving circuit. Changing any value in the "Protocol" section is
a breaking change: proofs built with different values will verify locally but
be rejected by the circuit.
"""

# ====================
# Field Parameters
# ====================

# Scalar field modulus of BLS12-381, the field the Poseidon circuit works over
FIELD_MODULUS = 0x73EDA753299D7D483339D80809A1D80553BDA402FFFE5BFEFFFFFFFF00000001

# Canonical external width of a field element (big-endian)
FIELD_ELEMENT_BYTES = 32

# ====================
# Protocol
# ====================

# Fixed depth of the commitment tree, shared with the circuit
MERKLE_PATH_LEN = 3

# Number of leaves every tree is padded to
TREE_CAPACITY = 1 << MERKLE_PATH_LEN

# Sentinel used for the first two fields of every padding leaf.
# Real identifiers are never empty, so padding cannot collide with a record leaf field.
PADDING_SENTINEL = "DUMMY"

# Arity of the Poseidon instances used by the circuit
NODE_ARITY = 2
LEAF_ARITY = 3

# ====================
# Lineage Traversal
# ====================

# Parent levels returned per store fetch while walking an ancestor chain
DEFAULT_PRELOAD_DEPTH = 3

# Upper bound on ancestor chain length, independent of the cycle guard
DEFAULT_MAX_LINEAGE_DEPTH = 1024

# ====================
# Network
# ====================

DEFAULT_POSEIDON_SERVICE_URL = "http://localhost:8080"
DEFAULT_REQUEST_TIMEOUT = 30
