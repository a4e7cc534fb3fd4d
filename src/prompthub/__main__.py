import sys

import uvicorn

from prompthub.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "prompthub.app:create_app",
        factory=True,
        host=settings.server.host,
        port=settings.server.port,
        workers=settings.server.workers,
        log_level=settings.logging.level.lower(),
    )


if __name__ == "__main__":
    sys.exit(main())  # type: ignore[func-returns-value]
