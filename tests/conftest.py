"""Shared fixtures for the forensics test suite."""

from __future__ import annotations

import itertools
from datetime import datetime, timedelta, timezone

import pytest

BASE_TIME = datetime(2026, 2, 1, 10, 0, tzinfo=timezone.utc)
FIXED_NOW = datetime(2026, 2, 15, 12, 30, tzinfo=timezone.utc)


@pytest.fixture
def make_tx():
    """Factory for transaction dicts; timestamps are BASE_TIME + minutes."""
    counter = itertools.count(1)

    def _make(sender, receiver, minutes=0.0, amount=100.0):
        ts = BASE_TIME + timedelta(minutes=minutes)
        return {
            "transaction_id": f"TX_{next(counter):05d}",
            "sender_id": sender,
            "receiver_id": receiver,
            "amount": amount,
            "timestamp": ts.strftime("%Y-%m-%dT%H:%M:%SZ"),
        }

    return _make


@pytest.fixture
def fixed_now():
    return FIXED_NOW
