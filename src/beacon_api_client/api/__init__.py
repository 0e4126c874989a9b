"""
Beacon API request layer: errors, results, models, Type Mapper and client.
"""

from .errors import (
    ApiError,
    DecodeError,
    HttpStatusError,
    NetworkError,
    RequestTimeout,
    StreamClosed,
    UnrecognizedEventKind,
)
from .result import Err, Ok, Result
from .models import ErrorMessage, HealthStatus, IndexedError, Versioned
from .identifiers import BlockId, StateId, ValidatorId
from .mapper import decode, decode_response, encode, resolve_fork
from .endpoints import ENDPOINTS, EndpointDescriptor, HttpMethod, RequestParams

# The client pulls in the event stream, which depends on the modules above.
from .client import BeaconApiClient

__all__ = [
    # Errors
    "ApiError",
    "DecodeError",
    "HttpStatusError",
    "NetworkError",
    "RequestTimeout",
    "StreamClosed",
    "UnrecognizedEventKind",
    # Results
    "Err",
    "Ok",
    "Result",
    # Models
    "ErrorMessage",
    "HealthStatus",
    "IndexedError",
    "Versioned",
    # Identifiers
    "BlockId",
    "StateId",
    "ValidatorId",
    # Type Mapper
    "decode",
    "decode_response",
    "encode",
    "resolve_fork",
    # Request layer
    "ENDPOINTS",
    "BeaconApiClient",
    "EndpointDescriptor",
    "HttpMethod",
    "RequestParams",
]
