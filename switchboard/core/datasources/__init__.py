"""Datasource profiles, registry and invocation."""

from switchboard.core.datasources.invoker import DatasourceInvoker, backoff_delay
from switchboard.core.datasources.loader import load_and_register_datasources
from switchboard.core.datasources.models import (
    CallRequest,
    CallResult,
    DatasourceProfile,
    HttpMethod,
)
from switchboard.core.datasources.registry import DatasourceRegistry
from switchboard.core.datasources.transport import HttpxTransport, TransportResponse

__all__ = [
    "CallRequest",
    "CallResult",
    "DatasourceInvoker",
    "DatasourceProfile",
    "DatasourceRegistry",
    "HttpMethod",
    "HttpxTransport",
    "TransportResponse",
    "backoff_delay",
    "load_and_register_datasources",
]
