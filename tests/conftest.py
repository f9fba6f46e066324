from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

TOKYO = ZoneInfo("Asia/Tokyo")


@pytest.fixture
def tz():
    return TOKYO


@pytest.fixture
def now():
    # Tuesday, midday in Tokyo
    return datetime(2026, 3, 10, 12, 0, tzinfo=TOKYO)
