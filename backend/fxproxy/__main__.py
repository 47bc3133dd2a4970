"""Run the proxy: ``python -m fxproxy``."""

import logging

import uvicorn

from fxproxy import config


def main() -> None:
    logging.basicConfig(
        level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    uvicorn.run("fxproxy.main:app", host=config.HOST, port=config.PORT)


if __name__ == "__main__":
    main()
