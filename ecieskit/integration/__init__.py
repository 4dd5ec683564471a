# Integration Module
"""
Pipeline event logging.

Loggers are passed to operations explicitly as observers.
"""

# Lazy imports to avoid RuntimeWarning when running module directly
def __getattr__(name):
    """Lazy import to avoid circular import issues."""
    from . import event_logger
    return getattr(event_logger, name)

__all__ = [
    'EventType',
    'PipelineEvent',
    'EventLogger',
    'emit',
    'key_fingerprint',
    'new_operation_id',
    'stdlib_callback',
    'create_event_logger',
]
