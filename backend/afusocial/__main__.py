"""Run the API with ``python -m afusocial``."""

import uvicorn

from afusocial.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "afusocial.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
