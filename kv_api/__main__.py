"""Run the service with uvicorn: ``python -m kv_api``."""

import uvicorn

from kv_api.core.config import settings


def main() -> None:
    uvicorn.run(
        "kv_api.main:app",
        host=settings.server.host,
        port=settings.server.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
