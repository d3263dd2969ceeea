"""Salesforce REST client for schema description.

Authenticates with an existing session id (OAuth access token) sent as
a Bearer token. Obtaining that token (login flows) is left to the
caller; see ConnectionConfig.session_id.

The client is synchronous: metadata calls are expected from one
connection-owning thread, and async callers wrap it in a worker thread.
"""

import logging
from typing import Any

import httpx

from salesforce_metadata.config import ConnectionConfig, settings
from salesforce_metadata.describe import parse_sobject_describe, queryable_object_names
from salesforce_metadata.models import Table

logger = logging.getLogger(__name__)


class SalesforceRestClient:
    """HTTP client for the Salesforce REST describe endpoints.

    Handles common error patterns from the REST API and converts them
    to ConnectionError / PermissionError / ValueError.
    """

    def __init__(self, config: ConnectionConfig | None = None) -> None:
        self.config = config if config is not None else settings.connection_config()
        self._client: httpx.Client | None = None

    def _get_client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            if not self.config.session_id:
                raise PermissionError(
                    "No Salesforce session id configured. "
                    "Set SF_SESSION_ID or pass sessionId in the connection URL."
                )
            self._client = httpx.Client(
                base_url=self.config.base_url,
                verify=self.config.verify_ssl,
                timeout=self.config.timeout,
                headers={
                    "Authorization": f"Bearer {self.config.session_id}",
                    "Accept": "application/json",
                },
            )
        return self._client

    def _handle_request_error(self, e: Exception, path: str) -> None:
        """Handle common Salesforce REST request errors.

        Raises:
            ConnectionError: When Salesforce is unreachable or times out.
            PermissionError: On 401 (expired or invalid session).
            ValueError: On 404 or other HTTP errors.
        """
        if isinstance(e, httpx.ConnectError):
            logger.error("Cannot connect to Salesforce at %s: %s", self.config.base_url, e)
            raise ConnectionError(
                f"Cannot connect to Salesforce at {self.config.base_url}. "
                "Verify the instance URL and network access."
            ) from e

        if isinstance(e, httpx.TimeoutException):
            logger.error("Request to %s timed out: %s", path, e)
            raise ConnectionError(f"Salesforce request timed out: '{path}'.") from e

        if isinstance(e, httpx.HTTPStatusError):
            status = e.response.status_code
            if status == 401:
                logger.error("Authentication failed at %s", self.config.base_url)
                raise PermissionError(
                    "Salesforce rejected the session id (401). "
                    "The session may have expired; log in again."
                ) from e
            if status == 404:
                logger.error("Resource not found: %s", path)
                raise ValueError(
                    f"Resource not found: '{path}'. Verify the object name and API version."
                ) from e
            # Salesforce errors come back as [{"message": ..., "errorCode": ...}]
            sf_error_msg = ""
            try:
                error_data = e.response.json()
                if isinstance(error_data, list) and error_data:
                    error_data = error_data[0]
                if isinstance(error_data, dict) and "message" in error_data:
                    sf_error_msg = str(error_data["message"])
                    code = error_data.get("errorCode")
                    if code:
                        sf_error_msg = f"{code}: {sf_error_msg}"
            except Exception:
                sf_error_msg = e.response.text[:500]

            logger.error("Salesforce REST error %d: %s", status, sf_error_msg or e.response.text)
            raise ValueError(
                f"Salesforce REST error ({status}): {sf_error_msg or f'Status {status}'}"
            ) from e

        raise e

    def get(self, path: str) -> Any:
        """GET a path relative to the versioned REST root.

        Args:
            path: e.g. "sobjects/" or "sobjects/Account/describe/".

        Returns:
            Parsed JSON response.
        """
        client = self._get_client()
        url = f"{self.config.rest_base_path}/{path.lstrip('/')}"
        try:
            response = client.get(url)
            response.raise_for_status()
            return response.json()
        except (httpx.ConnectError, httpx.TimeoutException, httpx.HTTPStatusError) as e:
            self._handle_request_error(e, url)

    def describe_global(self) -> dict[str, Any]:
        """List every sObject visible to the session user."""
        return self.get("sobjects/")  # type: ignore[no-any-return]

    def describe_sobject(self, name: str) -> dict[str, Any]:
        """Describe one sObject, including its fields."""
        return self.get(f"sobjects/{name}/describe/")  # type: ignore[no-any-return]

    def fetch_tables(self) -> list[Table]:
        """Describe every queryable sObject.

        This is the SchemaCache fetcher. It makes one request per object,
        so it is slow on large orgs; the cache calls it once per
        connection.
        """
        names = queryable_object_names(self.describe_global())
        logger.info("describeGlobal returned %d queryable objects", len(names))
        tables: list[Table] = []
        for name in names:
            tables.append(parse_sobject_describe(self.describe_sobject(name)))
        logger.info(
            "Described %d objects, %d fields",
            len(tables),
            sum(len(t.columns) for t in tables),
        )
        return tables

    def close(self) -> None:
        """Close the HTTP client connection."""
        if self._client and not self._client.is_closed:
            self._client.close()
            logger.debug("Salesforce client connection closed")
