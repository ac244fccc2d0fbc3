"""Infrastructure Layer — HCL engine adapter, remote HTTP client, logging setup.

Invariants:
    - Every external call (network, parser library) is wrapped and mapped to
      hclrender errors before it leaves this package
    - No request state is kept here between calls

Design Decisions:
    - Thin wrappers over lark and httpx (ADR: single responsibility)
"""
