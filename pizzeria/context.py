from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass, field, replace

from opentelemetry import trace
from opentelemetry.baggage.propagation import W3CBaggagePropagator
from opentelemetry.context import Context
from opentelemetry.propagators.composite import CompositePropagator
from opentelemetry.sdk.trace.id_generator import RandomIdGenerator
from opentelemetry.trace import NonRecordingSpan, SpanContext, TraceFlags
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from .errors import DeadlineExceeded
from .faults.injector import FaultDirectives

logger = logging.getLogger(__name__)

INTERNAL_HEADER = "x-is-internal"
USER_ID_HEADER = "x-user-id"
TIMEOUT_HEADER = "x-request-timeout"

# W3C traceparent/tracestate plus baggage.
propagator = CompositePropagator([TraceContextTextMapPropagator(), W3CBaggagePropagator()])
_ids = RandomIdGenerator()


@dataclass(frozen=True)
class TraceContext:
    """Span of the current request, and the OpenTelemetry context it was extracted into.

    ``otel_context`` carries inbound baggage so it is forwarded with the span.
    """

    span_context: SpanContext
    otel_context: Context = field(default_factory=Context)

    @classmethod
    def new(cls) -> TraceContext:
        return cls(SpanContext(
            trace_id=_ids.generate_trace_id(),
            span_id=_ids.generate_span_id(),
            is_remote=False,
            trace_flags=TraceFlags(TraceFlags.SAMPLED),
        ))

    @classmethod
    def extract(cls, headers: Mapping[str, str]) -> TraceContext | None:
        """Continue the trace described by ``headers``, or None if there is none."""
        otel_context = propagator.extract(carrier=headers)
        span_context = trace.get_current_span(otel_context).get_span_context()
        if not span_context.is_valid:
            return None
        return cls(span_context, otel_context)

    def child(self) -> TraceContext:
        parent = self.span_context
        return replace(self, span_context=SpanContext(
            trace_id=parent.trace_id,
            span_id=_ids.generate_span_id(),
            is_remote=False,
            trace_flags=parent.trace_flags,
            trace_state=parent.trace_state,
        ))

    @property
    def trace_id(self) -> str:
        return trace.format_trace_id(self.span_context.trace_id)

    @property
    def span_id(self) -> str:
        return trace.format_span_id(self.span_context.span_id)

    def inject(self, carrier: dict[str, str]) -> None:
        """Write ``traceparent``, ``tracestate`` and ``baggage`` for this span into ``carrier``."""
        otel_context = trace.set_span_in_context(NonRecordingSpan(self.span_context), self.otel_context)
        propagator.inject(carrier, context=otel_context)


@dataclass(frozen=True)
class RequestContext:
    """Everything a dependency call needs to act on behalf of one request.

    Cancellation is modelled by ``deadline`` alone. A client that disconnects
    mid-request is not detected, so dependency calls already in flight run
    until they finish or the deadline passes.
    """

    trace: TraceContext = field(default_factory=TraceContext.new)
    authorization: str | None = None
    user_id: str | None = None
    faults: FaultDirectives = field(default_factory=FaultDirectives)
    internal: bool = False
    deadline: float | None = None

    @classmethod
    def from_headers(
        cls,
        headers: Mapping[str, str],
        *,
        internal_token: str,
        trust_client_traces: bool = False,
        timeout: float | None = None,
    ) -> RequestContext:
        lowered = {k.lower(): v for k, v in headers.items()}
        internal = bool(internal_token) and lowered.get(INTERNAL_HEADER) == internal_token

        incoming = None
        if internal or trust_client_traces:
            incoming = TraceContext.extract(lowered)
        if incoming is not None:
            span = incoming.child()
        else:
            span = TraceContext.new()
            if "traceparent" in lowered and not internal:
                logger.debug("Starting trace for external request", extra={"trace_id": span.trace_id})

        budget = timeout
        if internal and lowered.get(TIMEOUT_HEADER):
            try:
                remaining = float(lowered[TIMEOUT_HEADER])
            except ValueError:
                remaining = None
            if remaining is not None and remaining >= 0:
                budget = remaining if budget is None else min(budget, remaining)

        return cls(
            trace=span,
            authorization=lowered.get("authorization"),
            user_id=lowered.get(USER_ID_HEADER),
            faults=FaultDirectives.from_headers(lowered),
            internal=internal,
            deadline=None if budget is None else time.monotonic() + budget,
        )

    def remaining(self) -> float | None:
        if self.deadline is None:
            return None
        return self.deadline - time.monotonic()

    def check_deadline(self) -> None:
        remaining = self.remaining()
        if remaining is not None and remaining <= 0:
            raise DeadlineExceeded("request deadline exceeded")

    def timeout_for(self, default: float) -> float:
        """Per-call timeout: ``default`` capped by the remaining request budget."""
        self.check_deadline()
        remaining = self.remaining()
        return default if remaining is None else min(default, remaining)

    def sleep(self, seconds: float) -> None:
        remaining = self.remaining()
        if remaining is not None and seconds > remaining:
            time.sleep(max(remaining, 0.0))
            raise DeadlineExceeded("request deadline exceeded")
        time.sleep(seconds)

    def outbound_headers(self, internal_token: str) -> dict[str, str]:
        """Headers for a call made to a peer service on behalf of this request."""
        headers: dict[str, str] = {}
        self.trace.child().inject(headers)
        if self.authorization:
            headers["Authorization"] = self.authorization
        if self.user_id:
            headers["X-User-ID"] = self.user_id
        headers.update(self.faults.to_headers())
        headers["X-Is-Internal"] = internal_token
        remaining = self.remaining()
        if remaining is not None:
            headers["X-Request-Timeout"] = f"{max(remaining, 0.0):.3f}"
        return headers
