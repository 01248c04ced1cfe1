import os
from pathlib import Path

from loguru import logger

log_dir = Path(os.getenv("GALLERY_LOG_DIR", "logs"))
log_file = log_dir / "{time}.log"

logger.remove()
logger.add(
    log_file,
    rotation="256 MB",  # 每個檔案滿 256MB 就切分
    retention="10 days",
    compression="zip",
    encoding="utf-8",
    level=os.getenv("GALLERY_LOG_LEVEL", "DEBUG"),
)

if __name__ == "__main__":
    logger.info("Gallery router logger ready")
    logger.warning("Warnings go to {}", log_dir)
