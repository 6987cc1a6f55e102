"""dashauth entrypoint.

Run with:
  python -m dashauth
"""

import logging

import uvicorn

from dashauth.settings import Settings


def main() -> None:
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("dashauth").info(
        "Weather Dashboard API running at http://localhost:%d", settings.port
    )
    uvicorn.run(
        "dashauth.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
