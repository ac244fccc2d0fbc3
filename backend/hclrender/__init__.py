"""hclrender — HCL document evaluation and projection service.

Invariants:
    - Package root contains no executable code beyond the version constant

Design Decisions:
    - Explicit imports only, no star exports (ADR: no convention-over-config)
    - __version__ lives here so the `engine` binding and the API agree on it
"""

__version__ = "1.0.0"
