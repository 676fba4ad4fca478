"""
Pizza recommendation service.

Responsibilities:
- Serve catalog data (ingredients, doughs, tools) and recommendation history.
- Serve copywriting data (adjectives, names, quotes).
- Generate pizza recommendations that satisfy client restrictions.
- Run as one process or as separate services without code changes.
"""
