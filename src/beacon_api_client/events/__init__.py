"""
Beacon API event stream: SSE framing, typed events and subscriptions.
"""

from .demux import EventDemultiplexer, UnknownEventPolicy
from .models import (
    AttestationEvent,
    AttesterSlashingEvent,
    BlobSidecarEvent,
    BlockEvent,
    BlockGossipEvent,
    BlsToExecutionChangeEvent,
    ChainReorgEvent,
    ContributionAndProofEvent,
    DataColumnSidecarEvent,
    DomainEvent,
    EventKind,
    FinalizedCheckpointEvent,
    HeadEvent,
    PayloadAttributesEvent,
    ProposerSlashingEvent,
    SingleAttestationEvent,
    StreamGap,
    VoluntaryExitEvent,
)
from .sse import EventEnvelope, SseComment, SseParser
from .subscription import (
    InvalidTransition,
    ReconnectPolicy,
    ResumeMode,
    Subscription,
    SubscriptionConfig,
    SubscriptionState,
)
from .transport import EventStreamTransport, FrameStream, HttpxEventStreamTransport

__all__ = [
    # Framing
    "EventEnvelope",
    "SseComment",
    "SseParser",
    # Events
    "EventKind",
    "DomainEvent",
    "StreamGap",
    "AttestationEvent",
    "AttesterSlashingEvent",
    "BlobSidecarEvent",
    "BlockEvent",
    "BlockGossipEvent",
    "BlsToExecutionChangeEvent",
    "ChainReorgEvent",
    "ContributionAndProofEvent",
    "DataColumnSidecarEvent",
    "FinalizedCheckpointEvent",
    "HeadEvent",
    "PayloadAttributesEvent",
    "ProposerSlashingEvent",
    "SingleAttestationEvent",
    "VoluntaryExitEvent",
    # Decoding
    "EventDemultiplexer",
    "UnknownEventPolicy",
    # Subscriptions
    "EventStreamTransport",
    "FrameStream",
    "HttpxEventStreamTransport",
    "InvalidTransition",
    "ReconnectPolicy",
    "ResumeMode",
    "Subscription",
    "SubscriptionConfig",
    "SubscriptionState",
]
