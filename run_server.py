import os

import uvicorn

from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="server")


if __name__ == "__main__":
    port = int(os.getenv("PORT", 8080))
    logger.info("Starting commute helper", extra={"port": port})
    uvicorn.run(
        "commute_helper.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=port,
        reload=False,
    )
