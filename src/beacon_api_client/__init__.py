"""
Typed asyncio client for the Ethereum Beacon Node API.

REST calls go through `BeaconApiClient`; live chain events through
`BeaconApiClient.subscribe`.
"""

from .config import ClientConfig

# `api` must be imported before `events`: the event stream builds on the
# request layer's errors, results and Type Mapper.
from .api import (
    ApiError,
    BeaconApiClient,
    DecodeError,
    Err,
    HealthStatus,
    HttpStatusError,
    NetworkError,
    Ok,
    RequestTimeout,
    Result,
    StreamClosed,
    UnrecognizedEventKind,
    Versioned,
)
from .consensus import ForkName, ForkSchedule
from .events import (
    EventKind,
    ReconnectPolicy,
    ResumeMode,
    StreamGap,
    Subscription,
    SubscriptionConfig,
    UnknownEventPolicy,
)

__all__ = [
    "ClientConfig",
    "BeaconApiClient",
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
    "Versioned",
    "HealthStatus",
    # Forks
    "ForkName",
    "ForkSchedule",
    # Events
    "EventKind",
    "ReconnectPolicy",
    "ResumeMode",
    "StreamGap",
    "Subscription",
    "SubscriptionConfig",
    "UnknownEventPolicy",
]
