"""Shared fixtures for corporate action tests."""

from datetime import date
from decimal import Decimal

import pytest

from qanalytics.libraries.corporate_actions.models import TransactionRecord


@pytest.fixture
def transactions() -> list[TransactionRecord]:
    """Three AAPL lots supplied out of purchase order."""
    return [
        TransactionRecord(
            transaction_id="txn-2",
            quantity=Decimal("50"),
            price=Decimal("160"),
            purchase_date=date(2024, 3, 15),
            symbol="AAPL",
        ),
        TransactionRecord(
            transaction_id="txn-1",
            quantity=Decimal("100"),
            price=Decimal("150"),
            purchase_date=date(2024, 1, 10),
            symbol="AAPL",
        ),
        TransactionRecord(
            transaction_id="txn-3",
            quantity=Decimal("20"),
            price=Decimal("170"),
            purchase_date=date(2024, 5, 20),
            symbol="AAPL",
        ),
    ]
