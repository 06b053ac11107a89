"""Run the service: ``python -m leadbridge`` (binds HOST:PORT from settings)."""

import uvicorn

from leadbridge.config import settings


def main() -> None:
    uvicorn.run("leadbridge.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
