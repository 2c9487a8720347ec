"""Run the Quanta server: ``python -m quanta`` or ``quanta``."""

import logging

from . import Quanta
from .config import get_settings

logger = logging.getLogger("quanta")


def main():
    settings = get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = Quanta(settings=settings)
    logger.info("Quanta server running on http://%s:%s", settings.HOST, settings.PORT)
    logger.info("Groq API key: %s", "configured" if settings.GROQ_API_KEY else "missing")
    app.run(host=settings.HOST, port=settings.PORT, debug=settings.DEBUG)


if __name__ == "__main__":
    main()
