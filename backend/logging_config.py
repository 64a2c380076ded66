import logging
import re

from pythonjsonlogger.json import JsonFormatter

from .config import Settings


class PIIRedactingFilter(logging.Filter):
    _aadhaar_re = re.compile(r"\b\d{12}\b")
    _phone_re = re.compile(r"\b(?:\+91)?\d{10}\b")

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            msg = record.getMessage()
        except Exception:
            return True
        msg = self._aadhaar_re.sub("[REDACTED_AADHAAR]", msg)
        msg = self._phone_re.sub("[REDACTED_PHONE]", msg)
        record.msg = msg
        record.args = ()
        return True


def configure_logging(settings: Settings) -> None:
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    handler = logging.StreamHandler()

    if settings.LOG_JSON:
        formatter = JsonFormatter(fmt="%(asctime)s %(levelname)s %(name)s %(message)s")
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s"
        )

    handler.setFormatter(formatter)
    handler.addFilter(PIIRedactingFilter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]

    # Reduce noisy loggers
    logging.getLogger("uvicorn.access").setLevel(logging.INFO)
    logging.getLogger("multipart").setLevel(logging.WARNING)
