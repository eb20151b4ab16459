import uvicorn

from kwollect_input.config.settings import settings
from kwollect_input.utils.logger import logger


def main() -> None:
    logger.info(f"Kwollect input API on {settings.API_HOST}:{settings.API_PORT}")
    uvicorn.run(
        "kwollect_input.api.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
