"""
Lead Ingestion API client

Sends one import batch to the lead-ingestion service, which owns lead
persistence and duplicate resolution.

Features:
- Request timeouts (a hung request fails instead of waiting forever)
- Normalized {success, data, message} responses for every HTTP status
- Environment variable configuration
- Context manager support

There is no automatic retry: every retry is a deliberate user action.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import requests

# =========================================
# Logging
# =========================================

logger = logging.getLogger(__name__)

# =========================================
# Configuration
# =========================================

DEFAULT_BASE_URL = "http://localhost:5000/api"
DEFAULT_TIMEOUT = (3.05, 30)  # (connect, read) timeouts in seconds
IMPORT_ENDPOINT = "leads/import"


# =========================================
# Exceptions
# =========================================


class IngestionAPIError(RuntimeError):
    """
    Raised when the ingestion service cannot be reached or answered badly.

    Attributes:
        message: Human-readable error description
        status_code: HTTP status code (if applicable)
        payload: Raw response body (if parseable)
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        payload: Optional[Dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def __str__(self) -> str:
        parts = [self.message]
        if self.status_code:
            parts.append(f"(status={self.status_code})")
        return " ".join(parts)


@dataclass
class IngestionConfig:
    """
    Configuration for the ingestion service connection.

    Can be initialized from environment variables:
        config = IngestionConfig.from_env()
    """

    base_url: str = DEFAULT_BASE_URL
    token: Optional[str] = None
    timeout: Tuple[float, float] = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls) -> "IngestionConfig":
        """
        Load configuration from environment variables.

        Environment variables:
            LEAD_INGESTION_BASE_URL: Optional base URL (default: http://localhost:5000/api)
            LEAD_INGESTION_TOKEN: Optional bearer token
            LEAD_INGESTION_TIMEOUT_CONNECT: Optional connect timeout (default: 3.05)
            LEAD_INGESTION_TIMEOUT_READ: Optional read timeout (default: 30)
        """
        base_url = os.environ.get("LEAD_INGESTION_BASE_URL", DEFAULT_BASE_URL)
        token = os.environ.get("LEAD_INGESTION_TOKEN") or None

        connect_timeout = float(os.environ.get("LEAD_INGESTION_TIMEOUT_CONNECT", "3.05"))
        read_timeout = float(os.environ.get("LEAD_INGESTION_TIMEOUT_READ", "30"))

        return cls(
            base_url=base_url,
            token=token,
            timeout=(connect_timeout, read_timeout),
        )


@dataclass
class IngestionResponse:
    """Normalized service answer; unrecognized response fields are dropped."""

    success: bool
    data: Any = None
    message: Optional[str] = None
    status_code: Optional[int] = None


# =========================================
# Client
# =========================================


class LeadIngestionClient:
    """
    Client for the lead-ingestion service.

    Usage:
        with LeadIngestionClient.from_env() as client:
            response = client.import_leads(payload)
            if not response.success:
                print(response.message)
    """

    def __init__(self, config: Optional[IngestionConfig] = None):
        self.config = config or IngestionConfig()

        self.session = requests.Session()
        self.session.headers.update(
            {
                "User-Agent": "lead-import/1.0",
                "Accept": "application/json",
                "Content-Type": "application/json",
            }
        )
        if self.config.token:
            self.session.headers["Authorization"] = f"Bearer {self.config.token}"

        logger.debug("LeadIngestionClient initialized with base_url=%s", self.config.base_url)

    @classmethod
    def from_env(cls) -> "LeadIngestionClient":
        """Create client from environment variables."""
        return cls(config=IngestionConfig.from_env())

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()
        logger.debug("LeadIngestionClient session closed")

    def __enter__(self) -> "LeadIngestionClient":
        return self

    def __exit__(self, _exc_type, _exc_val, _exc_tb) -> None:
        self.close()

    # =========================================
    # Internal: Requests
    # =========================================

    def _url(self, endpoint: str) -> str:
        return f"{self.config.base_url.rstrip('/')}/{endpoint}"

    @staticmethod
    def _normalize(response: requests.Response) -> IngestionResponse:
        """
        Fold any HTTP response into {success, data, message}.

        A 2xx body that already carries ``success`` is taken as-is; anything
        else is judged by the status code.
        """
        http_message = f"HTTP {response.status_code}: {response.reason}"

        try:
            body = response.json()
        except ValueError:
            logger.warning("Non-JSON response body (status=%d)", response.status_code)
            body = None

        if not isinstance(body, dict):
            return IngestionResponse(
                success=response.ok,
                data=body if response.ok else None,
                message=None if response.ok else http_message,
                status_code=response.status_code,
            )

        if response.ok and "success" in body:
            return IngestionResponse(
                success=body["success"] is True,
                data=body.get("data"),
                message=body.get("message"),
                status_code=response.status_code,
            )

        return IngestionResponse(
            success=response.ok,
            data=(body.get("data") or body) if response.ok else None,
            message=body.get("message") or http_message,
            status_code=response.status_code,
        )

    def _post(self, endpoint: str, json_data: Dict) -> IngestionResponse:
        """
        POST a JSON body once.

        Raises:
            IngestionAPIError: On timeouts and connection failures
        """
        url = self._url(endpoint)
        logger.debug("POST %s", endpoint)

        try:
            response = self.session.post(url, json=json_data, timeout=self.config.timeout)
        except requests.exceptions.Timeout as e:
            logger.warning("POST %s timed out", endpoint)
            raise IngestionAPIError(f"Request timed out: {e}") from e
        except requests.exceptions.RequestException as e:
            logger.warning("POST %s request error: %s", endpoint, e)
            raise IngestionAPIError(f"Request failed: {e}") from e

        logger.debug("POST %s -> %d", endpoint, response.status_code)
        return self._normalize(response)

    # =========================================
    # Lead Import
    # =========================================

    def import_leads(self, payload: Dict) -> IngestionResponse:
        """Send one import batch (leads, columnMapping, fileName, duplicateChecks)."""
        logger.info(
            "Importing %d leads from %s",
            len(payload.get("leads", [])),
            payload.get("fileName"),
        )
        return self._post(IMPORT_ENDPOINT, payload)
