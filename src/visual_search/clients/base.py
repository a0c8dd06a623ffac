"""
Base HTTP client for backend services.

Provides standardized error handling and request patterns. Requests are
attempted exactly once; callers decide whether to retry.
"""

from __future__ import annotations

from typing import Any

import httpx

from visual_search.core.exceptions import (
    InvalidUpstreamResponseError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)
from visual_search.logging import get_logger


class BackendClient:
    """
    Base class for backend service clients.

    Owns one pooled ``httpx.AsyncClient`` shared by all requests.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float,
        connect_timeout: float,
        service_name: str,
    ) -> None:
        """
        Initialize the backend client.

        Args:
            base_url: Base URL for the service (e.g., "http://localhost:8000")
            timeout: Request timeout in seconds
            connect_timeout: Connection establishment timeout in seconds
            service_name: Name of the service for logging and error messages
        """
        self.base_url = base_url
        self.service_name = service_name
        self.timeout = timeout

        self.client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout, connect=connect_timeout),
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    def _parse_backend_http_error(self, error: httpx.HTTPStatusError) -> tuple[str, str]:
        """Extract backend error code and message from an error response."""
        error_code = "unknown"
        error_message = str(error)

        try:
            backend_error = error.response.json()
        except ValueError:
            get_logger().warning(
                "Backend error payload was not valid JSON",
                extra={
                    "backend": self.service_name,
                    "status_code": error.response.status_code,
                    "path": str(error.request.url.path),
                },
            )
            return error_code, error_message

        if isinstance(backend_error, dict):
            parsed_error_code = backend_error.get("error")
            # FastAPI services put the reason under "detail"
            parsed_error_message = backend_error.get("message", backend_error.get("detail"))
            if parsed_error_code is not None:
                error_code = str(parsed_error_code)
            if parsed_error_message is not None:
                error_message = str(parsed_error_message)

        return error_code, error_message

    async def health_check(self) -> str:
        """
        Check backend health.

        Returns:
            Status string ("healthy", "unhealthy", "unavailable", "error", or "unknown")
        """
        status = "unknown"
        logger = get_logger()

        try:
            response = await self.client.get("/health")
            response.raise_for_status()
            data = response.json()

            parsed_status = data.get("status") if isinstance(data, dict) else None
            if parsed_status is not None:
                status = str(parsed_status)
        except httpx.ConnectError:
            status = "unavailable"
            logger.warning(
                "Backend health check failed: connection error",
                extra={"backend": self.service_name},
            )
        except httpx.TimeoutException:
            status = "unavailable"
            logger.warning(
                "Backend health check failed: timeout",
                extra={"backend": self.service_name},
            )
        except httpx.HTTPStatusError as e:
            status = "unavailable" if e.response.status_code == 503 else "error"
            logger.warning(
                "Backend health check failed: HTTP status error",
                extra={
                    "backend": self.service_name,
                    "status_code": e.response.status_code,
                },
            )
        except ValueError:
            status = "error"
            logger.warning(
                "Backend health check failed: invalid JSON response",
                extra={"backend": self.service_name},
            )
        except httpx.HTTPError:
            status = "unavailable"
            logger.exception(
                "Backend health check failed: transport error",
                extra={"backend": self.service_name},
            )

        return status

    async def _request(
        self,
        method: str,
        path: str,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """
        Make request with standardized error handling.

        Args:
            method: HTTP method (GET, POST, etc.)
            path: Request path
            **kwargs: Additional arguments passed to httpx

        Returns:
            Response JSON object

        Raises:
            UpstreamTimeoutError: Connect or read timeout
            UpstreamUnavailableError: Transport failure or non-2xx status
            InvalidUpstreamResponseError: Body is not a JSON object
        """
        logger = get_logger()

        try:
            response = await self.client.request(method, path, **kwargs)
            response.raise_for_status()
            response_data = response.json()

        except httpx.TimeoutException as e:
            logger.warning(
                "Backend timeout",
                extra={
                    "backend": self.service_name,
                    "path": path,
                    "timeout": self.timeout,
                },
            )
            raise UpstreamTimeoutError(
                message=f"{self.service_name} service timed out",
                details={
                    "backend": self.service_name,
                    "timeout_seconds": self.timeout,
                    "cause": type(e).__name__,
                },
            ) from e

        except httpx.HTTPStatusError as e:
            error_code, error_message = self._parse_backend_http_error(e)
            logger.warning(
                "Backend error",
                extra={
                    "backend": self.service_name,
                    "status_code": e.response.status_code,
                    "error": error_code,
                    "backend_message": error_message,
                },
            )
            raise UpstreamUnavailableError(
                message=f"{self.service_name} service error: {error_message}",
                details={
                    "backend": self.service_name,
                    "backend_error": error_code,
                    "backend_message": error_message,
                    "backend_status_code": e.response.status_code,
                },
            ) from e

        except httpx.TransportError as e:
            logger.warning(
                "Backend unavailable",
                extra={
                    "backend": self.service_name,
                    "url": self.base_url,
                    "error_type": type(e).__name__,
                },
            )
            raise UpstreamUnavailableError(
                message=f"{self.service_name} service is not responding",
                details={
                    "backend": self.service_name,
                    "url": self.base_url,
                    "cause": str(e) or type(e).__name__,
                },
            ) from e

        except ValueError as e:
            logger.warning(
                "Backend returned invalid JSON",
                extra={"backend": self.service_name, "path": path},
            )
            raise InvalidUpstreamResponseError(
                message=f"{self.service_name} service returned invalid JSON response",
                details={"backend": self.service_name, "path": path},
            ) from e

        if not isinstance(response_data, dict):
            raise InvalidUpstreamResponseError(
                message=f"{self.service_name} service returned a non-object JSON response",
                details={
                    "backend": self.service_name,
                    "path": path,
                    "response_type": type(response_data).__name__,
                },
            )

        return response_data
