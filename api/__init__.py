"""SagaScript HTTP client and its offline-aware resource accessors."""

from api.api_client import SagaScriptClient
from api.resources import SagaScriptResources, ResourcePolicy

__all__ = [
    "SagaScriptClient",
    "SagaScriptResources",
    "ResourcePolicy",
]
