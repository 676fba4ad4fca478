"""
Per-request fault injection.

Clients ask for synthetic failures by sending, for an action such as
``get-ingredients``, any of these headers:

* ``x-error-<action>``: error message to fail the action with.
* ``x-error-<action>-percentage``: chance (0-100) of the error firing.
* ``x-delay-<action>``: delay before the action runs, e.g. ``250ms``.
* ``x-delay-<action>-percentage``: chance (0-100) of the delay applying.

A missing percentage means "always".  The headers travel with every
internal call made on behalf of the request, so a fault requested at the
edge fires in whichever service performs the action.
"""
from __future__ import annotations

import logging
import math
import random
import re
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field

from ..errors import UpstreamUnavailable

logger = logging.getLogger(__name__)

GET_INGREDIENTS = "get-ingredients"
RECORD_RECOMMENDATION = "record-recommendation"
FAULT_ACTIONS = (GET_INGREDIENTS, RECORD_RECOMMENDATION)

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")
_DURATION_UNITS = {
    "ns": 1e-9, "us": 1e-6, "µs": 1e-6, "μs": 1e-6,
    "ms": 1e-3, "s": 1.0, "m": 60.0, "h": 3600.0,
}


def header_names(action: str) -> tuple[str, str, str, str]:
    return (
        f"x-error-{action}",
        f"x-error-{action}-percentage",
        f"x-delay-{action}",
        f"x-delay-{action}-percentage",
    )


def parse_duration(value: str) -> float:
    """Parse ``"1m30s"``/``"250ms"`` style durations, or bare seconds, into seconds."""
    text = value.strip()
    try:
        seconds = float(text)
    except ValueError:
        pass
    else:
        if not math.isfinite(seconds) or seconds < 0:
            raise ValueError(f"invalid duration {value!r}")
        return seconds

    pos = 0
    total = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    if pos == 0 or pos != len(text):
        raise ValueError(f"invalid duration {value!r}")
    return total


def _parse_percentage(value: str | None, header: str) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        logger.warning("Ignoring unparseable %s=%r; the fault will not fire", header, value)
        return 0.0


@dataclass(frozen=True)
class FaultDirective:
    error: str | None = None
    error_percentage: float | None = None
    delay: float | None = None
    delay_percentage: float | None = None


@dataclass(frozen=True)
class FaultDirectives:
    """Raw fault headers attached to one request, kept verbatim for forwarding."""

    headers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_headers(
        cls,
        headers: Mapping[str, str],
        actions: Iterable[str] = FAULT_ACTIONS,
    ) -> FaultDirectives:
        lowered = {k.lower(): v for k, v in headers.items()}
        picked: dict[str, str] = {}
        for action in actions:
            for name in header_names(action):
                value = lowered.get(name)
                if value:
                    picked[name] = value
        return cls(headers=picked)

    def to_headers(self) -> dict[str, str]:
        return dict(self.headers)

    def __bool__(self) -> bool:
        return bool(self.headers)

    def directive(self, action: str) -> FaultDirective:
        error_h, error_pct_h, delay_h, delay_pct_h = header_names(action)

        delay: float | None = None
        raw_delay = self.headers.get(delay_h)
        if raw_delay:
            try:
                delay = parse_duration(raw_delay)
            except ValueError:
                logger.warning("Ignoring unparseable %s=%r", delay_h, raw_delay)

        return FaultDirective(
            error=self.headers.get(error_h) or None,
            error_percentage=_parse_percentage(self.headers.get(error_pct_h), error_pct_h),
            delay=delay,
            delay_percentage=_parse_percentage(self.headers.get(delay_pct_h), delay_pct_h),
        )


def _fires(percentage: float | None, rng: random.Random) -> bool:
    if percentage is None:
        return True
    return rng.random() * 100.0 < percentage


def inject_faults(
    faults: FaultDirectives,
    action: str,
    rng: random.Random | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Fail or delay ``action`` as requested by ``faults``.

    Raises ``UpstreamUnavailable`` carrying the configured message when the
    error directive fires; the delay directive is then not considered.
    """
    if not faults:
        return
    rng = rng or random

    directive = faults.directive(action)
    if directive.error and _fires(directive.error_percentage, rng):
        logger.warning("Injecting error for %s: %s", action, directive.error)
        raise UpstreamUnavailable(directive.error)

    if directive.delay and _fires(directive.delay_percentage, rng):
        logger.warning("Injecting %.3fs delay for %s", directive.delay, action)
        sleep(directive.delay)


@dataclass(frozen=True)
class ServiceFaults:
    """Process-wide delay and failure rate applied to every request of a service."""

    delay_ms: int = 0
    fail_percentage: float = 0.0

    def delay(self, sleep: Callable[[float], None] | None = None) -> None:
        if self.delay_ms > 0:
            (sleep or time.sleep)(self.delay_ms / 1000.0)

    def should_fail(self, rng: random.Random | None = None) -> bool:
        if self.fail_percentage <= 0:
            return False
        return (rng or random).random() * 100.0 < self.fail_percentage
