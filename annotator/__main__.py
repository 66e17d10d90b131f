"""Run the Queue Annotator API with uvicorn (``python -m annotator``)."""

import logging

import uvicorn

from annotator.config import get_settings


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    settings = get_settings()
    uvicorn.run("annotator.main:app", host=settings.host, port=settings.port, log_level="info")


if __name__ == "__main__":
    main()
