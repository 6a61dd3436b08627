"""Entrypoint: run the LitQuery server."""

import uvicorn

from litquery.api.app import create_app
from litquery.config.settings import Settings


def main() -> None:
    settings = Settings()
    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
