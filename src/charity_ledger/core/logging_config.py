import logging
import sys
import json
from datetime import datetime, timezone

# Attributes every LogRecord has; anything else on a record came in through `extra=`
RECORD_ATTRIBUTES = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

class JsonFormatter(logging.Formatter):
    """
    One JSON object per line, tagged with the service name. Fields passed
    with `extra=` (charity_id, donation_id, amount, ...) become top-level keys.
    """
    def __init__(self, service: str):
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "service": self.service,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        log_record.update(
            (key, value) for key, value in vars(record).items()
            if key not in RECORD_ATTRIBUTES and key not in log_record
        )

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        # Decimal amounts and datetimes are written as strings
        return json.dumps(log_record, default=str)

def configure_logging(level: str = "INFO", service: str = "charity-ledger") -> None:
    """
    Sends every log line to stdout as JSON, which CloudWatch picks up from Lambda.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers = []

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter(service=service))
    root_logger.addHandler(handler)

    for noisy in ("botocore", "boto3", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
