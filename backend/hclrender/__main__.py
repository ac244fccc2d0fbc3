"""Entry point for `python -m hclrender`: serve the API on settings.listen."""

import sys

import uvicorn

from hclrender.config import get_settings
from hclrender.core.errors import ConfigurationError


def main() -> int:
    try:
        settings = get_settings()
    except ConfigurationError as e:
        print(f"Cannot start hclrender: {e.message}", file=sys.stderr)
        return 1
    uvicorn.run(
        "hclrender.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
