"""
Local development server: ``python -m reviewgate``.
"""

import uvicorn

from reviewgate.config import settings


def main() -> None:
    uvicorn.run("reviewgate.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
