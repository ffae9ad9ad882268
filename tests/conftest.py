"""Shared fixtures for trip-settle tests."""

import json

import pytest


@pytest.fixture
def trip_data():
    """Raw trip document as stored on disk."""
    return {
        "title": "Summer Vacation",
        "participants": ["Alice", "Bob", "Charlie"],
        "expenses": [
            {
                "amount": 90,
                "currency": "USD",
                "description": "Dinner at a restaurant",
                "note": "10% tip included",
                "payer": "Alice",
                "participants": ["Alice", "Bob", "Charlie"],
                "paymentMethod": "card",
            },
            {
                "amount": 4500,
                "currency": "JPY",
                "description": "Taxi to the hotel",
                "payer": "Bob",
                "participants": ["Bob", "Charlie"],
                "paymentMethod": "cash",
            },
        ],
    }


@pytest.fixture
def write_trip(tmp_path):
    """Write a trip document to a temporary JSON file."""

    def _write(data, name="trip.json"):
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Keep the developer's environment and .env out of the tests."""
    for var in ("TRIP_SETTLE_CURRENCY_EXPONENTS", "TRIP_SETTLE_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
