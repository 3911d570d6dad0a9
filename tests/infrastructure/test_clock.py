from datetime import datetime, timezone

import pytest
from conftest import DAY0, day

from benkyo.domain.errors import InvalidArgument
from benkyo.infrastructure.clock import FixedClock, SystemClock


def test_system_clock_is_utc():
    now = SystemClock().now()
    assert now.tzinfo is timezone.utc


def test_fixed_clock():
    clock = FixedClock(DAY0)
    assert clock.now() == DAY0
    clock.set(day(1))
    assert clock.now() == day(1)


def test_fixed_clock_rejects_naive_time():
    with pytest.raises(InvalidArgument):
        FixedClock(datetime(2026, 3, 1))
