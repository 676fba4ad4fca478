from __future__ import annotations

import time
from unittest.mock import patch

import pytest

from pizzeria.context import RequestContext, TraceContext
from pizzeria.errors import DeadlineExceeded

TRACE_ID = "4bf92f3577b34da6a3ce929d0e0e4736"
TRACEPARENT = f"00-{TRACE_ID}-00f067aa0ba902b7-01"


# ── Trace context ────────────────────────────────────────────────────────


def test_extract_trace_headers():
    trace = TraceContext.extract({"traceparent": TRACEPARENT, "tracestate": "vendor=1"})
    assert trace.trace_id == TRACE_ID
    assert trace.span_id == "00f067aa0ba902b7"

    headers = {}
    trace.inject(headers)
    assert headers["traceparent"] == TRACEPARENT
    assert headers["tracestate"] == "vendor=1"


@pytest.mark.parametrize(
    "value",
    ["", "garbage", f"ff-{TRACE_ID}-00f067aa0ba902b7-01", f"00-{'0' * 32}-00f067aa0ba902b7-01"],
)
def test_extract_invalid_traceparent(value):
    assert TraceContext.extract({"traceparent": value}) is None


def test_extract_without_headers():
    assert TraceContext.extract({}) is None


def test_new_trace_is_valid_and_sampled():
    headers = {}
    TraceContext.new().inject(headers)
    version, trace_id, span_id, flags = headers["traceparent"].split("-")
    assert (version, flags) == ("00", "01")
    assert len(trace_id) == 32 and len(span_id) == 16


def test_child_keeps_trace_and_changes_span():
    parent = TraceContext.extract({"traceparent": TRACEPARENT})
    child = parent.child()
    assert child.trace_id == parent.trace_id
    assert child.span_id != parent.span_id


def test_baggage_travels_with_trace():
    trace = TraceContext.extract({"traceparent": TRACEPARENT, "baggage": "tenant=acme"})
    headers = {}
    trace.child().inject(headers)
    assert headers["baggage"] == "tenant=acme"


# ── Request context ──────────────────────────────────────────────────────


def test_internal_marker_must_match_token():
    assert RequestContext.from_headers({"X-Is-Internal": "s3cret"}, internal_token="s3cret").internal
    assert not RequestContext.from_headers({"X-Is-Internal": "1"}, internal_token="s3cret").internal
    assert not RequestContext.from_headers({}, internal_token="s3cret").internal


def test_internal_request_continues_trace():
    ctx = RequestContext.from_headers(
        {"traceparent": TRACEPARENT, "x-is-internal": "1"}, internal_token="1",
    )
    assert ctx.trace.trace_id == TRACE_ID


def test_external_request_starts_new_trace():
    ctx = RequestContext.from_headers({"traceparent": TRACEPARENT}, internal_token="1")
    assert ctx.trace.trace_id != TRACE_ID


def test_trusted_client_trace_is_continued():
    ctx = RequestContext.from_headers(
        {"traceparent": TRACEPARENT}, internal_token="1", trust_client_traces=True,
    )
    assert ctx.trace.trace_id == TRACE_ID


def test_outbound_headers_propagate_request_metadata():
    ctx = RequestContext.from_headers(
        {
            "traceparent": TRACEPARENT,
            "tracestate": "vendor=1",
            "authorization": "Bearer abc",
            "x-user-id": "42",
            "x-error-get-ingredients": "boom",
            "x-is-internal": "1",
        },
        internal_token="1",
        timeout=5.0,
    )
    headers = ctx.outbound_headers("1")

    assert headers["traceparent"].startswith(f"00-{TRACE_ID}-")
    assert headers["traceparent"] != TRACEPARENT
    assert headers["tracestate"] == "vendor=1"
    assert headers["Authorization"] == "Bearer abc"
    assert headers["X-User-ID"] == "42"
    assert headers["x-error-get-ingredients"] == "boom"
    assert headers["X-Is-Internal"] == "1"
    assert 0 < float(headers["X-Request-Timeout"]) <= 5.0


def test_baggage_forwarded_only_for_continued_traces():
    inbound = {"traceparent": TRACEPARENT, "baggage": "tenant=acme", "x-is-internal": "1"}
    internal = RequestContext.from_headers(inbound, internal_token="1")
    assert internal.outbound_headers("1")["baggage"] == "tenant=acme"

    external = RequestContext.from_headers({**inbound, "x-is-internal": "0"}, internal_token="1")
    assert "baggage" not in external.outbound_headers("1")


def test_internal_timeout_header_shortens_budget():
    ctx = RequestContext.from_headers(
        {"x-is-internal": "1", "x-request-timeout": "0.5"}, internal_token="1", timeout=30.0,
    )
    assert ctx.remaining() <= 0.5


def test_external_timeout_header_is_ignored():
    ctx = RequestContext.from_headers({"x-request-timeout": "0.5"}, internal_token="1", timeout=30.0)
    assert ctx.remaining() > 0.5


def test_no_deadline_by_default():
    ctx = RequestContext()
    assert ctx.remaining() is None
    assert ctx.timeout_for(10.0) == 10.0
    ctx.check_deadline()


def test_expired_deadline():
    ctx = RequestContext(deadline=time.monotonic() - 1)
    with pytest.raises(DeadlineExceeded):
        ctx.check_deadline()
    with pytest.raises(DeadlineExceeded):
        ctx.timeout_for(10.0)


@patch("pizzeria.context.time.sleep")
def test_sleep_cut_short_by_deadline(mock_sleep):
    ctx = RequestContext(deadline=time.monotonic() + 0.05)
    with pytest.raises(DeadlineExceeded):
        ctx.sleep(10.0)
    (slept,), _ = mock_sleep.call_args
    assert slept <= 0.05


@patch("pizzeria.context.time.sleep")
def test_sleep_within_budget(mock_sleep):
    RequestContext(deadline=time.monotonic() + 60).sleep(0.01)
    mock_sleep.assert_called_once_with(0.01)
