"""
Pizza recommendation engine.

Responsibilities:
- Apply restriction defaults and filter the catalog pools.
- Draw random candidates until one fits the calorie budget (best effort).
- Persist the accepted pizza through the catalog and return it.
"""
