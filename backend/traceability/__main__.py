"""
Entry point: `python -m traceability` (or the `traceability-api` script).

Runs uvicorn on HOST:PORT from settings. If the startup database check
fails, uvicorn's lifespan aborts and the process exits non-zero before the
port is bound.
"""

import uvicorn

from traceability.config import settings


def main() -> None:
    uvicorn.run(
        "traceability.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        lifespan="on",
    )


if __name__ == "__main__":
    main()
