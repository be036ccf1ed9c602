"""
Kanpo AI — ロガー

configure_logging() を一度呼び、各モジュールは get_logger("client") のように取得する。
"""

import logging
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ROOT_LOGGER = "kanpo_ai"

_configured = False


def configure_logging(level: str = "INFO", log_file: Optional[str] = None, force: bool = False) -> None:
    """ルートロガー kanpo_ai を設定 (二回目以降は force=True のときのみ)"""
    global _configured

    if _configured and not force:
        return

    log_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(log_level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """kanpo_ai.<name> のロガー"""
    if name.startswith(ROOT_LOGGER):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
