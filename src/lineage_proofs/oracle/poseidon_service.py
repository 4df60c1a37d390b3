"""
Poseidon Service Oracle

Client for the audited Poseidon hash service that shares its parameters with
the proving circuit. The service exposes a single endpoint:

    POST {base_url}/poseidon-hash   {"inputs": ["0x..", ...]}  ->  {"hash": "0x.."}

Inputs and the digest travel as the field's 32-byte little-endian
representation, which is what the service reads and writes for a scalar.
This differs from the big-endian hex32 used in the proving payload, so the
conversion happens here and nowhere else.
"""

import logging
import os
from typing import Optional, Sequence

import requests

from .. import config
from ..errors import InvalidInputError, OracleError
from ..field import FieldElement, is_hex32, to_bytes32, to_field_element, to_hex32
from .base import HashOracle

logger = logging.getLogger(__name__)

# Inputs hashed once during setup to prove the service answers correctly shaped digests
_PROBE_INPUTS = (1, 2)


def to_wire_hex(value: FieldElement) -> str:
    """Render a field element as ``0x`` + its little-endian 32-byte repr."""
    return "0x" + to_bytes32(value)[::-1].hex()


def from_wire_hex(hex_str: str) -> FieldElement:
    """
    Parse a little-endian 32-byte field repr as returned by the service.

    Raises:
        InvalidInputError: If the string is not 32-byte hex or not below p
    """
    if not is_hex32(hex_str, strict_case=False):
        raise InvalidInputError(f"{hex_str!r} is not a 32-byte hex string")
    return to_field_element(bytes.fromhex(hex_str[2:])[::-1])


class PoseidonServiceOracle(HashOracle):
    """
    Hash oracle backed by the remote Poseidon service.

    No retries are performed; connection failures, timeouts and malformed
    responses surface as OracleError.
    """

    name = "poseidon-service"
    circuit_compatible = True

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        """
        Initialize the oracle client.

        Args:
            base_url: Service base URL. If None, uses POSEIDON_SERVICE_URL.
            timeout: Per-request timeout in seconds. If None, uses REQUEST_TIMEOUT.
        """
        settings = config.get_settings()
        self.base_url = (base_url or os.getenv("POSEIDON_SERVICE_URL") or settings.poseidon_service_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self._is_setup = False

        self.session = requests.Session()
        self.session.headers.update({
            'Content-Type': 'application/json',
            'Accept': 'application/json'
        })

        logger.info(f"Initialized PoseidonServiceOracle with base_url: {self.base_url}")

    def setup(self) -> None:
        if self._is_setup:
            return
        digest = self.hash(list(_PROBE_INPUTS))
        logger.info(f"Poseidon service probe succeeded: {to_hex32(digest)}")
        self._is_setup = True

    def hash(self, inputs: Sequence[FieldElement]) -> FieldElement:
        elements = self._check_inputs(inputs)
        url = f"{self.base_url}/poseidon-hash"
        body = {"inputs": [to_wire_hex(e) for e in elements]}

        try:
            logger.debug(f"Poseidon request: {body['inputs']}")
            response = self.session.post(url, json=body, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.ConnectionError as e:
            raise OracleError(
                f"Failed to connect to Poseidon service at {self.base_url}. "
                f"Check that the service is running and POSEIDON_SERVICE_URL is correct. "
                f"Original error: {e}"
            ) from e
        except requests.Timeout as e:
            raise OracleError(
                f"Timeout after {self.timeout}s waiting for Poseidon service at {self.base_url}. "
                f"Original error: {e}"
            ) from e
        except requests.RequestException as e:
            raise OracleError(f"Request to Poseidon service failed: {e}") from e
        except ValueError as e:
            raise OracleError(f"Poseidon service returned invalid JSON: {e}") from e

        digest = data.get("hash") if isinstance(data, dict) else None
        try:
            return from_wire_hex(digest)
        except InvalidInputError as e:
            raise OracleError(f"Poseidon hash malformed: {digest!r}") from e

    def health_check(self) -> bool:
        """
        Check if the Poseidon service answers a probe hash.

        Returns:
            True if the service is reachable and well-behaved, False otherwise
        """
        try:
            self.hash(list(_PROBE_INPUTS))
            return True
        except OracleError as e:
            logger.warning(f"Poseidon service health check failed: {e}")
            return False
