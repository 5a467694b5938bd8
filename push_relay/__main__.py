import logging

import uvicorn

from push_relay.core.config import settings
from push_relay.core.logging_config import configure_logging

logger = logging.getLogger("push_relay")


def main() -> None:
    configure_logging(settings.log_level)
    base_url = f"http://localhost:{settings.port}"
    logger.info("서버 시작 (port=%s)", settings.port)
    logger.info("웹 페이지: %s/", base_url)
    logger.info("헬스 체크: %s/health", base_url)
    logger.info("푸시 엔드포인트: %s/push", base_url)
    uvicorn.run("push_relay.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
