"""API Layer — FastAPI routes and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Errors rendered as plain text or JSON depending on settings.error_format

Design Decisions:
    - Thin routes delegate to services.render_document
"""
