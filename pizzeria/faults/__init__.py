"""
Fault injection used to exercise the resilience of callers.

Responsibilities:
- Carry per-request error/delay directives between services as headers.
- Fail or delay a dependency action right before it does real work.
- Apply process-wide delay/failure knobs to whole services.
"""
