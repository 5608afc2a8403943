"""eventgate entrypoint.

Run with:
  python -m eventgate
"""

import uvicorn

from eventgate.config import Settings


def main() -> None:
    settings = Settings.from_env()
    if settings.reload:
        # reload needs an import string; the factory re-reads the environment
        uvicorn.run("eventgate.app:create_app", factory=True, host=settings.host, port=settings.port, reload=True)
        return

    from eventgate.app import create_app

    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)

if __name__ == "__main__":
    main()
