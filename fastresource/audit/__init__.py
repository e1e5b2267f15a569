# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from fastresource.audit.sinks import EventLogSink, LoggingEventLogSink, MemoryEventLogSink, ModelEventLogSink
from fastresource.audit.logger import REDACTED, ActionEventLogger, redact


__all__ = [
    "EventLogSink",
    "LoggingEventLogSink",
    "MemoryEventLogSink",
    "ModelEventLogSink",
    "REDACTED",
    "ActionEventLogger",
    "redact",
]
