"""Run the API with uvicorn on HOST:PORT (python -m musicdb)."""

import uvicorn

from musicdb.config import settings


def main() -> None:
    uvicorn.run(
        "musicdb.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
