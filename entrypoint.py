"""Server entrypoint: starts uvicorn on the configured port."""
import uvicorn

from portfolio_helper.config.settings import get_settings
from portfolio_helper.main import create_app


def main() -> None:
    settings = get_settings()
    uvicorn.run(create_app(), host="127.0.0.1", port=settings.port)


if __name__ == "__main__":
    main()
