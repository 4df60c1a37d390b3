"""
Proving Service Client

HTTP client for the external SNARK proving microservice:

    POST {base_url}/generate-proof   ProofRequestPayload  ->  proof JSON
    POST {base_url}/verify-proof     VerifyProofRequest   ->  verification JSON
"""

import logging
import os
from typing import Any, Dict, List, Optional, Union

import requests
from pydantic import ValidationError

from .. import config
from ..errors import InvalidInputError, ProvingServiceError
from ..models import ProofRequestPayload, VerifyProofRequest

logger = logging.getLogger(__name__)


class ProvingServiceClient:
    """Client for the proving service's generate/verify endpoints."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        """
        Initialize the proving service client.

        Args:
            base_url: Service base URL. If None, uses ZKP_SERVICE_URL.
            timeout: Per-request timeout in seconds. If None, uses REQUEST_TIMEOUT.

        Raises:
            ProvingServiceError: If no URL is configured
        """
        settings = config.get_settings()
        url = base_url or os.getenv("ZKP_SERVICE_URL") or settings.zkp_service_url
        if not url:
            raise ProvingServiceError(
                "No proving service URL configured. Set ZKP_SERVICE_URL or pass base_url."
            )
        self.base_url = url.rstrip("/")
        self.timeout = timeout if timeout is not None else settings.request_timeout

        self.session = requests.Session()
        self.session.headers.update({
            'Content-Type': 'application/json',
            'Accept': 'application/json'
        })

        logger.info(f"Initialized ProvingServiceClient with base_url: {self.base_url}")

    def _post(self, endpoint: str, body: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        try:
            logger.debug(f"Making request to: {url}")
            response = self.session.post(url, json=body, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.ConnectionError as e:
            raise ProvingServiceError(
                f"Failed to connect to proving service at {self.base_url}. "
                f"Check that the service is running and ZKP_SERVICE_URL is correct. "
                f"Original error: {e}"
            ) from e
        except requests.Timeout as e:
            raise ProvingServiceError(
                f"Timeout after {self.timeout}s waiting for proving service at {url}. "
                f"Proof generation can be slow; consider raising REQUEST_TIMEOUT. "
                f"Original error: {e}"
            ) from e
        except requests.HTTPError as e:
            text = e.response.text if e.response is not None else ""
            status = e.response.status_code if e.response is not None else None
            raise ProvingServiceError(
                f"Proving service error {status} from {endpoint}: {text}",
                details={"status": status, "endpoint": endpoint},
            ) from e
        except requests.RequestException as e:
            raise ProvingServiceError(f"Request to {url} failed: {e}") from e
        except ValueError as e:
            raise ProvingServiceError(f"Proving service returned invalid JSON: {e}") from e

    def generate_proof(self, payload: ProofRequestPayload) -> Dict[str, Any]:
        """
        Submit a proving request.

        Args:
            payload: Validated proving request

        Returns:
            The service's JSON response
        """
        logger.info(
            f"Submitting proof request for {payload.descendant_id} -> {payload.ancestor_id} "
            f"(leaf {payload.merkle_leaf_index})"
        )
        return self._post("generate-proof", payload.model_dump())

    def verify_proof(
        self,
        proof: Union[bytes, List[int]],
        public_inputs: List[Union[bytes, List[int]]],
    ) -> Dict[str, Any]:
        """
        Ask the service to verify a SNARK proof.

        Args:
            proof: Proof bytes
            public_inputs: Exactly two public inputs of 32 bytes each

        Returns:
            The service's JSON response

        Raises:
            InvalidInputError: If the inputs do not have the expected shape
        """
        try:
            request = VerifyProofRequest(
                proof=list(proof),
                public_inputs=[list(item) for item in public_inputs],
            )
        except ValidationError as e:
            raise InvalidInputError(f"Invalid verify request: {e}") from e
        return self._post("verify-proof", request.model_dump())

    def health_check(self) -> bool:
        """
        Check if the proving service answers HTTP at all.

        Returns:
            True if the service is reachable, False otherwise
        """
        try:
            response = self.session.get(self.base_url, timeout=self.timeout)
            return response.status_code < 500
        except requests.RequestException as e:
            logger.warning(f"Proving service health check failed: {e}")
            return False
