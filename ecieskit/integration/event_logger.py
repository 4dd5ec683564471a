"""
Event Logger Module

Records what the ECIES pipeline did, stage by stage, for auditing and
debugging. A logger is handed to an operation as its observer; nothing is
kept in module-level state.

Features:
- One event per pipeline stage (secret, KDF, cipher, framing)
- Events grouped by a per-operation id
- Public keys recorded as short SHA-256 fingerprints
- Callbacks, including a bridge to the standard `logging` module
- JSON export/import of the log

Secrets, derived keys, IVs and plaintext are never recorded. Failed
decryptions are logged with one generic reason.

Author: ecieskit
"""

import hashlib
import json
import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any, Callable


# ============================================================================
# Constants
# ============================================================================

EVENT_VERSION = "1.0"
FINGERPRINT_LENGTH = 16


# ============================================================================
# Helpers
# ============================================================================

def key_fingerprint(public_bytes: bytes) -> str:
    """
    Short fingerprint of an encoded public key.

    Lets the log correlate events for the same ephemeral key without
    storing the key itself.
    """
    return hashlib.sha256(public_bytes).hexdigest()[:FINGERPRINT_LENGTH]


def new_operation_id() -> str:
    """Random id shared by all events of one encrypt/decrypt operation."""
    return uuid.uuid4().hex[:16]


# ============================================================================
# Event Types
# ============================================================================

class EventType(Enum):
    """Pipeline events that can be logged."""

    KEY_PAIR_GENERATED = "key_pair_generated"
    SECRET_COMPUTED = "secret_computed"
    KEY_DERIVED = "key_derived"
    PAYLOAD_ENCRYPTED = "payload_encrypted"
    PAYLOAD_DECRYPTED = "payload_decrypted"
    OUTPUT_FRAMED = "output_framed"
    OPERATION_FAILED = "operation_failed"


# ============================================================================
# Event Structure
# ============================================================================

@dataclass
class PipelineEvent:
    """A single recorded pipeline event."""
    event_type: EventType
    operation_id: str
    timestamp: float
    details: Dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> str:
        """Serialize event as compact JSON."""
        return json.dumps({
            'version': EVENT_VERSION,
            'type': self.event_type.value,
            'op': self.operation_id,
            'time': self.timestamp,
            'details': self.details,
        }, separators=(',', ':'))

    @classmethod
    def from_json(cls, data: str) -> 'PipelineEvent':
        """Parse event from JSON."""
        parsed = json.loads(data)
        return cls(
            event_type=EventType(parsed['type']),
            operation_id=parsed['op'],
            timestamp=parsed['time'],
            details=parsed.get('details', {}),
        )

    def __str__(self) -> str:
        dt = datetime.fromtimestamp(self.timestamp)
        return (
            f"[{dt.strftime('%Y-%m-%d %H:%M:%S')}] "
            f"{self.event_type.value} | "
            f"op:{self.operation_id[:8]}..."
        )


# ============================================================================
# Event Logger
# ============================================================================

class EventLogger:
    """
    In-memory pipeline event log.

    Safe to share between threads; appends are serialized by a lock.
    """

    def __init__(self, max_events: Optional[int] = None):
        """
        Initialize the event logger.

        Args:
            max_events: Keep at most this many events (oldest dropped);
                None keeps everything
        """
        self._events: List[PipelineEvent] = []
        self._max_events = max_events
        self._callbacks: List[Callable[[PipelineEvent], None]] = []
        self._lock = threading.Lock()

    def record(self, event_type: EventType, operation_id: str,
               **details: Any) -> PipelineEvent:
        """
        Record an event and notify callbacks.

        Args:
            event_type: Kind of event
            operation_id: Id of the operation the event belongs to
            **details: JSON-serializable, non-secret details

        Returns:
            The logged event
        """
        event = PipelineEvent(
            event_type=event_type,
            operation_id=operation_id,
            timestamp=time.time(),
            details=details,
        )

        with self._lock:
            self._events.append(event)
            if self._max_events is not None and len(self._events) > self._max_events:
                del self._events[:len(self._events) - self._max_events]
            callbacks = list(self._callbacks)

        for callback in callbacks:
            try:
                callback(event)
            except Exception:
                # Callback errors never reach the pipeline
                logging.getLogger(__name__).exception(
                    "Event callback failed for %s", event.event_type.value
                )

        return event

    def add_callback(self, callback: Callable[[PipelineEvent], None]) -> None:
        """Add a callback to be notified of new events."""
        with self._lock:
            self._callbacks.append(callback)

    def remove_callback(self, callback: Callable[[PipelineEvent], None]) -> None:
        """Remove a callback."""
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    # ========================================================================
    # Retrieval
    # ========================================================================

    @property
    def count(self) -> int:
        with self._lock:
            return len(self._events)

    def get_all_events(self) -> List[PipelineEvent]:
        """Snapshot of all logged events, oldest first."""
        with self._lock:
            return list(self._events)

    def get_events_by_type(self, event_type: EventType) -> List[PipelineEvent]:
        """Get all events of a specific type."""
        return [e for e in self.get_all_events() if e.event_type == event_type]

    def get_operation_events(self, operation_id: str) -> List[PipelineEvent]:
        """Get all events of one operation, in stage order."""
        return [e for e in self.get_all_events() if e.operation_id == operation_id]

    def get_recent_events(self, count: int = 10) -> List[PipelineEvent]:
        """Get the most recent events."""
        events = self.get_all_events()
        return events[-count:] if len(events) > count else events

    def clear(self) -> None:
        with self._lock:
            self._events.clear()

    def print_audit_log(self, last_n: Optional[int] = None) -> None:
        """Print the audit log in a readable format."""
        events = self.get_all_events()
        total = len(events)
        if last_n:
            events = events[-last_n:]

        print("\n" + "=" * 70)
        print("ECIES AUDIT LOG")
        print("=" * 70)

        for event in events:
            print(event)
            for k, v in event.details.items():
                print(f"    {k}: {v}")

        print("=" * 70)
        print(f"Total events: {total}")
        print("=" * 70)

    def export_log(self) -> str:
        """Export the entire log as a JSON array."""
        return json.dumps([json.loads(e.to_json()) for e in self.get_all_events()])

    @classmethod
    def import_log(cls, json_str: str) -> 'EventLogger':
        """Import a log previously produced by export_log()."""
        event_logger = cls()
        for item in json.loads(json_str):
            event_logger._events.append(PipelineEvent.from_json(json.dumps(item)))
        return event_logger


# ============================================================================
# Convenience Functions
# ============================================================================

def emit(observer: Optional[EventLogger], event_type: EventType,
         operation_id: str, **details: Any) -> None:
    """Record an event if an observer was supplied."""
    if observer is not None:
        observer.record(event_type, operation_id, **details)


def stdlib_callback(logger_name: str = "ecieskit",
                    level: int = logging.DEBUG) -> Callable[[PipelineEvent], None]:
    """
    Build a callback that forwards events to a standard library logger.

    Failures are forwarded at WARNING regardless of `level`.
    """
    logger = logging.getLogger(logger_name)

    def _forward(event: PipelineEvent) -> None:
        event_level = logging.WARNING if event.event_type == EventType.OPERATION_FAILED else level
        logger.log(event_level, "%s op=%s %s",
                   event.event_type.value, event.operation_id, event.details)

    return _forward


def create_event_logger(max_events: Optional[int] = None) -> EventLogger:
    """Create a new event logger."""
    return EventLogger(max_events=max_events)
