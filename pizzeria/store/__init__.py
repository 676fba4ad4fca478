"""
In-process data store shared by the catalog and copy services.

Responsibilities:
- Hold seed reference data (ingredients, doughs, tools, naming vocabulary).
- Persist generated recommendations with a bounded history.
"""
