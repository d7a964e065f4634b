from loguru import logger
from token_explorer.json_log_handler import jsonLogHandler
import os, sys
from dotenv import load_dotenv

load_dotenv()

# Уровень логирования
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
log_type = os.getenv("LOG_TYPE", "stdout")

# dev оставляет стандартный sink loguru
if log_type != "dev":
    logger.remove()

# Логи записываются в файл
if log_type == "volume":
    logger.add("logs/debug.log", format="{time} {level} {extra[request_id]} {message}", level=LOG_LEVEL, rotation="100 MB")

# Логи выводятся в консоль
elif log_type == "stdout":
    logger.add(sys.stdout, format="{time} {level} {extra[request_id]} {message}", level=LOG_LEVEL)

# Логи одной JSON-строкой на запись
elif log_type == "json":
    logger.add(jsonLogHandler, level=LOG_LEVEL)

logger.configure(extra={"request_id": "-"})

__all__ = ["logger"]
