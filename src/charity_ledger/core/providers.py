"""Time and id sources injected into the repositories"""

import uuid
from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]
IdFactory = Callable[[], str]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())
