import json
import logging
import os
import sys


_RESERVED_ATTRS = set(
    logging.LogRecord(None, None, None, None, '', (), None).__dict__.keys()
)


class CustomJSONFormatter(logging.Formatter):
    def format(self, record):
        log_record = {
            "timestamp": self.formatTime(record, self.datefmt),
            "name": record.name,
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": "sfetch",
        }

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        # Anything passed through `extra=` ends up as a record attribute
        extra_attributes = set(record.__dict__.keys()) - _RESERVED_ATTRS - {"exc_info"}
        for key in extra_attributes:
            if key not in log_record:
                log_record[key] = record.__dict__.get(key)

        return json.dumps(log_record, default=str)


def setup_logging(log_level=None):
    log_level = (log_level or os.getenv("LOG_LEVEL", "INFO")).upper()
    formatter = CustomJSONFormatter()

    logger = logging.getLogger("sfetch")
    logger.setLevel(log_level)

    # Idempotent: the handler module may be imported more than once per process
    if any(getattr(h, "_sfetch_handler", False) for h in logger.handlers):
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    console_handler._sfetch_handler = True
    logger.addHandler(console_handler)
    return logger
