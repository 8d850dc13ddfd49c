import logging

import uvicorn

from relay.config import settings


def main():
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger(__name__).info(
        "%s backend on port %s", settings.METHOD, settings.PORT
    )
    uvicorn.run("relay.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()
