"""
Theologos - Unified Error Handling

Error hierarchy for the library engine and the layers around it.

Every failure the engine can raise is locally recoverable by the caller:
- NotFoundError: a slug, unit or page does not resolve
- InvalidArgumentError: a position index is not a positive integer
- AmbiguousSlugError: more than one distinct title derives the same slug

Degenerate inputs (empty text, no citations, missing translation
segments) are valid and never raise.

The layers around the engine add LibraryConfigError (settings),
CorpusFormatError (corpus files) and LibraryDatabaseError (storage).
"""

from __future__ import annotations

import sys
import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode


class ErrorSeverity(Enum):
    """Error severity levels for prioritized handling."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass
class ErrorContext:
    """Structured context for error debugging and tracing."""

    operation: str
    component: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    trace_id: Optional[str] = None
    span_id: Optional[str] = None
    work_slug: Optional[str] = None
    position: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    stack_trace: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert context to dictionary for serialization."""
        return {
            "operation": self.operation,
            "component": self.component,
            "timestamp": self.timestamp.isoformat(),
            "trace_id": self.trace_id,
            "span_id": self.span_id,
            "work_slug": self.work_slug,
            "position": self.position,
            "metadata": self.metadata,
            "stack_trace": self.stack_trace,
        }

    @classmethod
    def from_current_span(
        cls,
        operation: str,
        component: str,
        **kwargs: Any
    ) -> "ErrorContext":
        """
        Context stamped with the active span's ids.

        stack_trace is only filled in while an exception is being handled.
        """
        trace_id = span_id = None
        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            trace_id = format(span_context.trace_id, "032x")
            span_id = format(span_context.span_id, "016x")

        stack_trace = traceback.format_exc() if sys.exc_info()[0] is not None else None
        return cls(
            operation=operation,
            component=component,
            trace_id=trace_id,
            span_id=span_id,
            stack_trace=stack_trace,
            **kwargs
        )


class LibraryError(Exception):
    """
    Base exception for all library errors.

    Provides:
    - Structured error context
    - Severity level
    - Chained exception support
    - OpenTelemetry span recording
    """

    default_severity: ErrorSeverity = ErrorSeverity.ERROR
    error_code: str = "LIBRARY_ERROR"

    def __init__(
        self,
        message: str,
        context: Optional[ErrorContext] = None,
        severity: Optional[ErrorSeverity] = None,
        cause: Optional[Exception] = None,
        recoverable: bool = True,
        suggestions: Optional[List[str]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context
        self.severity = severity or self.default_severity
        self.cause = cause
        self.recoverable = recoverable
        self.suggestions = suggestions or []
        self.timestamp = datetime.now(timezone.utc)

        self._record_to_span()

    def _record_to_span(self) -> None:
        """Record exception to current OpenTelemetry span."""
        span = trace.get_current_span()
        if span and span.is_recording():
            span.set_status(Status(StatusCode.ERROR, self.message))
            span.record_exception(self)
            span.set_attribute("error.code", self.error_code)
            span.set_attribute("error.severity", self.severity.value)
            span.set_attribute("error.recoverable", self.recoverable)
            if self.context:
                span.set_attribute("error.component", self.context.component)
                span.set_attribute("error.operation", self.context.operation)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for transport adapters."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "severity": self.severity.value,
            "recoverable": self.recoverable,
            "suggestions": self.suggestions,
            "timestamp": self.timestamp.isoformat(),
            "context": self.context.to_dict() if self.context else None,
            "cause": str(self.cause) if self.cause else None,
        }

    def __str__(self) -> str:
        parts = [f"[{self.error_code}] {self.message}"]
        if self.context:
            parts.append(f" (component: {self.context.component})")
        if self.cause:
            parts.append(f" [caused by: {self.cause}]")
        return "".join(parts)


class NotFoundError(LibraryError):
    """A slug, unit or page does not resolve."""

    error_code = "NOT_FOUND"
    default_severity = ErrorSeverity.INFO

    def __init__(
        self,
        message: str,
        resource: Optional[str] = None,
        identifier: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.resource = resource
        self.identifier = identifier


class InvalidArgumentError(LibraryError, ValueError):
    """A requested argument (typically a position index) is malformed."""

    error_code = "INVALID_ARGUMENT"
    default_severity = ErrorSeverity.WARNING

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        actual_value: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field_name = field_name
        self.actual_value = actual_value


class AmbiguousSlugError(LibraryError):
    """More than one distinct title derives the requested slug."""

    error_code = "AMBIGUOUS_SLUG"
    default_severity = ErrorSeverity.WARNING

    def __init__(
        self,
        message: str,
        slug: Optional[str] = None,
        titles: Sequence[str] = (),
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.slug = slug
        self.titles = list(titles)


class LibraryConfigError(LibraryError):
    """Configuration-related errors."""

    error_code = "CONFIG_ERROR"
    default_severity = ErrorSeverity.CRITICAL

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        actual_value: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, recoverable=False, **kwargs)
        self.config_key = config_key
        self.actual_value = actual_value


class CorpusFormatError(LibraryError):
    """A corpus file could not be parsed into library entities."""

    error_code = "CORPUS_FORMAT_ERROR"
    default_severity = ErrorSeverity.ERROR

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(message, recoverable=False, **kwargs)
        self.source = source


class LibraryDatabaseError(LibraryError):
    """The relational store rejected a read or write."""

    error_code = "DATABASE_ERROR"
    default_severity = ErrorSeverity.ERROR

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.operation = operation
