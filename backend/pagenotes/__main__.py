"""Run the API server: ``python -m pagenotes`` (HOST / PORT from settings)."""

import uvicorn

from pagenotes.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "pagenotes.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
