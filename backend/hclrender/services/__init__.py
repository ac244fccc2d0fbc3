"""Services Layer — function handlers, function registry, render pipeline.

Invariants:
    - Handlers grouped by function family (strings, numeric, hashing, ...)
    - The registry maps names to handlers with an explicit dict (no auto-discovery)
    - render_document is the only entry point the API layer calls

Design Decisions:
    - One handler file per family for locality (ADR: no god objects)
"""
