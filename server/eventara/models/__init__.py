"""Model clients — Protocol interface, backends and the backend registry."""

from eventara.models.protocol import ContentPart, GenerativeModelClient
from eventara.models.registry import available_backends, create_model_client

__all__ = [
    "ContentPart",
    "GenerativeModelClient",
    "available_backends",
    "create_model_client",
]
