"""
Client for the embedding generation service.
"""

from __future__ import annotations

import math

from visual_search.clients.base import BackendClient
from visual_search.core.exceptions import InvalidUpstreamResponseError, NoInputProvidedError

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class EmbeddingsClient(BackendClient):
    """
    Client for the embedding service.

    Uploads an image to ``POST /generate-embedding`` and returns the vector
    from the ``embedding`` field of the response.
    """

    async def get_embedding(
        self,
        image_bytes: bytes,
        filename: str,
        content_type: str | None = None,
    ) -> list[float]:
        """
        Generate an embedding for an image.

        Args:
            image_bytes: Raw image file contents (must be non-empty)
            filename: Original filename, forwarded to the service as a hint
            content_type: MIME type of the image, if known

        Returns:
            Embedding vector as list of floats

        Raises:
            NoInputProvidedError: If image_bytes is empty
            UpstreamUnavailableError: Service unreachable or returned an error status
            UpstreamTimeoutError: Service did not answer in time
            InvalidUpstreamResponseError: Response has no usable embedding
        """
        if not image_bytes:
            raise NoInputProvidedError(
                message="Image payload is empty",
                details={"filename": filename},
            )

        files = {"file": (filename, image_bytes, content_type or DEFAULT_CONTENT_TYPE)}
        result = await self._request("POST", "/generate-embedding", files=files)

        embedding = result.get("embedding")
        if embedding is None:
            raise InvalidUpstreamResponseError(
                message="Embedding service returned response without 'embedding' field",
                details={"backend": self.service_name, "response_keys": sorted(result.keys())},
            )
        if not isinstance(embedding, list):
            embed_type = type(embedding).__name__
            raise InvalidUpstreamResponseError(
                message=f"Embedding service returned non-list embedding: {embed_type}",
                details={"backend": self.service_name, "embedding_type": embed_type},
            )
        if len(embedding) == 0:
            raise InvalidUpstreamResponseError(
                message="Embedding service returned empty embedding vector",
                details={"backend": self.service_name},
            )

        # bool is an int subclass but never a meaningful component
        if any(isinstance(x, bool) or not isinstance(x, (int, float)) for x in embedding):
            raise InvalidUpstreamResponseError(
                message="Embedding service returned non-numeric values in embedding",
                details={"backend": self.service_name},
            )

        try:
            vector = [float(x) for x in embedding]
        except OverflowError as e:
            raise InvalidUpstreamResponseError(
                message="Embedding service returned values out of float range in embedding",
                details={"backend": self.service_name},
            ) from e
        if not all(math.isfinite(x) for x in vector):
            raise InvalidUpstreamResponseError(
                message="Embedding service returned NaN or infinite values in embedding",
                details={"backend": self.service_name},
            )

        return vector
