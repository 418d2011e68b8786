"""Run the relay with uvicorn: ``python -m chat_relay``."""

import uvicorn

from chat_relay.config.settings import settings


def main() -> None:
    uvicorn.run("chat_relay.api.app:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
