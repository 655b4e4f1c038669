from logging.config import dictConfig
from pydantic import BaseModel
from typing import Dict

from tradehub.core.config import settings


class LogConfig(BaseModel):
    """Configuration de journalisation pour l'application"""

    LOG_FORMAT: str = "%(levelprefix)s | %(asctime)s | %(name)s | %(funcName)s | %(lineno)d | %(message)s"
    LOG_LEVEL: str = "INFO"

    version: int = 1
    disable_existing_loggers: bool = False

    def build(self) -> Dict:
        return {
            "version": self.version,
            "disable_existing_loggers": self.disable_existing_loggers,
            "formatters": {
                "default": {
                    "()": "uvicorn.logging.DefaultFormatter",
                    "fmt": self.LOG_FORMAT,
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
            },
            "handlers": {
                "default": {
                    "formatter": "default",
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "level": self.LOG_LEVEL,
                },
            },
            "loggers": {
                "tradehub": {"handlers": ["default"], "level": self.LOG_LEVEL, "propagate": False},
                "uvicorn": {"handlers": ["default"], "level": "WARNING", "propagate": False},
                "uvicorn.error": {"level": "INFO", "propagate": False},
                "uvicorn.access": {"handlers": ["default"], "level": "WARNING", "propagate": False},
            },
        }


def configure_logging():
    """Applique la configuration de journalisation"""
    config = LogConfig(LOG_LEVEL=settings.LOG_LEVEL.upper())
    dictConfig(config.build())
