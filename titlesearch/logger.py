'''
Logger centralisé de titlesearch.

Loguru est configuré à l'import : une sortie console colorée, puis des
fichiers rotatifs séparés pour l'API (debug, info, erreurs) et pour
l'importeur de tables HTML, dont les journaux d'import sont gardés à part.
'''

import sys
import os
from loguru import logger

from titlesearch.config import settings

LOG_DIR = settings.LOG_DIR
IMPORTER_MODULE = "titlesearch.importer"

os.makedirs(LOG_DIR, exist_ok=True)

LOG_FORMAT_CONSOLE = (
    "<white>{time:YYYY-MM-DD HH:mm:ss.SSS}</white> | "
    "<level>{level: <8}</level> | "
    "<light-black>{name}:{function}:{line}</light-black> - "
    "<level><b>{message}</b></level>"
)
LOG_FORMAT_FILE = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"
# Pas de numéro de ligne : une entrée par version ou titre inséré.
LOG_FORMAT_IMPORT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}"


def is_importer_record(record) -> bool:
    """Vrai pour les messages émis par ``titlesearch.importer``."""
    name = record["name"] or ""
    return name == IMPORTER_MODULE or name.startswith(IMPORTER_MODULE + ".")


def _api_debug(record) -> bool:
    return record["level"].name == "DEBUG" and not is_importer_record(record)


def _api_info(record) -> bool:
    return record["level"].name in ("INFO", "WARNING") and not is_importer_record(record)


# (fichier, niveau minimal, filtre, format)
FILE_SINKS = (
    ("debug.log", "DEBUG", _api_debug, LOG_FORMAT_FILE),
    ("info.log", "INFO", _api_info, LOG_FORMAT_FILE),
    ("error.log", "ERROR", None, LOG_FORMAT_FILE),
    ("import.log", "DEBUG", is_importer_record, LOG_FORMAT_IMPORT),
)

logger.remove()

logger.add(
    sys.stderr,
    level=settings.LOG_LEVEL,
    format=LOG_FORMAT_CONSOLE,
    colorize=True,
    backtrace=True,
    diagnose=True
)

for filename, level, record_filter, log_format in FILE_SINKS:
    logger.add(
        os.path.join(LOG_DIR, filename),
        level=level,
        format=log_format,
        filter=record_filter,
        rotation="00:00",
        retention="30 days",
        compression="zip",
        encoding="utf-8",
        backtrace=level == "ERROR",
        diagnose=level == "ERROR",
    )
