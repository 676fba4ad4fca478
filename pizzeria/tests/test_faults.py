from __future__ import annotations

import random
from unittest.mock import MagicMock

import pytest

from pizzeria.errors import UpstreamUnavailable
from pizzeria.faults.injector import (
    GET_INGREDIENTS,
    RECORD_RECOMMENDATION,
    FaultDirectives,
    ServiceFaults,
    inject_faults,
    parse_duration,
)


class _FixedRandom(random.Random):
    """Always rolls the same value in [0, 1)."""

    def __init__(self, value: float) -> None:
        super().__init__()
        self.value = value

    def random(self) -> float:
        return self.value


# ── Durations ────────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "text,seconds",
    [
        ("250ms", 0.25),
        ("1.5s", 1.5),
        ("1m30s", 90.0),
        ("2h", 7200.0),
        ("500us", 0.0005),
        ("0.2", 0.2),
    ],
)
def test_parse_duration(text, seconds):
    assert parse_duration(text) == pytest.approx(seconds)


@pytest.mark.parametrize("text", ["", "soon", "10 parsecs", "5ms later", "-1", "inf"])
def test_parse_duration_rejects_garbage(text):
    with pytest.raises(ValueError):
        parse_duration(text)


# ── Directives ───────────────────────────────────────────────────────────


def test_from_headers_keeps_only_known_fault_headers():
    faults = FaultDirectives.from_headers({
        "X-Error-Get-Ingredients": "boom",
        "x-delay-record-recommendation": "10ms",
        "x-error-something-else": "ignored",
        "x-error-get-ingredients-percentage": "",
        "Accept": "application/json",
    })
    assert faults.to_headers() == {
        "x-error-get-ingredients": "boom",
        "x-delay-record-recommendation": "10ms",
    }


def test_empty_directives_are_falsy():
    assert not FaultDirectives()
    assert not FaultDirectives.from_headers({"accept": "*/*"})


def test_directive_parses_values():
    faults = FaultDirectives.from_headers({
        "x-error-get-ingredients": "boom",
        "x-error-get-ingredients-percentage": "25",
        "x-delay-get-ingredients": "1s",
        "x-delay-get-ingredients-percentage": "not-a-number",
    })
    directive = faults.directive(GET_INGREDIENTS)
    assert directive.error == "boom"
    assert directive.error_percentage == 25.0
    assert directive.delay == 1.0
    assert directive.delay_percentage == 0.0


def test_directive_ignores_unparseable_delay():
    faults = FaultDirectives.from_headers({"x-delay-get-ingredients": "eventually"})
    assert faults.directive(GET_INGREDIENTS).delay is None


# ── Injection ────────────────────────────────────────────────────────────


def test_error_without_percentage_always_fires():
    faults = FaultDirectives.from_headers({"x-error-get-ingredients": "boom"})
    for _ in range(20):
        with pytest.raises(UpstreamUnavailable, match="boom"):
            inject_faults(faults, GET_INGREDIENTS)


def test_error_at_100_percent_always_fires():
    faults = FaultDirectives.from_headers({
        "x-error-get-ingredients": "boom",
        "x-error-get-ingredients-percentage": "100",
    })
    with pytest.raises(UpstreamUnavailable):
        inject_faults(faults, GET_INGREDIENTS, rng=_FixedRandom(0.999))


def test_error_at_0_percent_never_fires():
    faults = FaultDirectives.from_headers({
        "x-error-get-ingredients": "boom",
        "x-error-get-ingredients-percentage": "0",
    })
    inject_faults(faults, GET_INGREDIENTS, rng=_FixedRandom(0.0))


def test_error_scoped_to_its_action():
    faults = FaultDirectives.from_headers({"x-error-get-ingredients": "boom"})
    inject_faults(faults, RECORD_RECOMMENDATION)


def test_delay_sleeps():
    sleep = MagicMock()
    faults = FaultDirectives.from_headers({"x-delay-record-recommendation": "250ms"})
    inject_faults(faults, RECORD_RECOMMENDATION, sleep=sleep)
    sleep.assert_called_once_with(0.25)


def test_delay_percentage_miss_skips_sleep():
    sleep = MagicMock()
    faults = FaultDirectives.from_headers({
        "x-delay-record-recommendation": "250ms",
        "x-delay-record-recommendation-percentage": "50",
    })
    inject_faults(faults, RECORD_RECOMMENDATION, rng=_FixedRandom(0.75), sleep=sleep)
    sleep.assert_not_called()


def test_error_preempts_delay():
    sleep = MagicMock()
    faults = FaultDirectives.from_headers({
        "x-error-get-ingredients": "boom",
        "x-delay-get-ingredients": "1s",
    })
    with pytest.raises(UpstreamUnavailable):
        inject_faults(faults, GET_INGREDIENTS, sleep=sleep)
    sleep.assert_not_called()


# ── Service-level knobs ──────────────────────────────────────────────────


def test_service_faults_delay():
    sleep = MagicMock()
    ServiceFaults(delay_ms=150).delay(sleep)
    sleep.assert_called_once_with(0.15)


def test_service_faults_disabled_by_default():
    sleep = MagicMock()
    faults = ServiceFaults()
    faults.delay(sleep)
    sleep.assert_not_called()
    assert faults.should_fail(_FixedRandom(0.0)) is False


def test_service_faults_fail_rate():
    faults = ServiceFaults(fail_percentage=30)
    assert faults.should_fail(_FixedRandom(0.1)) is True
    assert faults.should_fail(_FixedRandom(0.5)) is False
