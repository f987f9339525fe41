"""pf-todo entrypoint.

Run with:
  python -m pftodo
"""

import uvicorn

from pftodo.core.config import load_settings


def main() -> None:
    settings = load_settings()
    uvicorn.run("pftodo.app:create_app", factory=True, host=settings.host, port=settings.port, reload=settings.reload)


if __name__ == "__main__":
    main()
