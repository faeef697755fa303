"""
Core business logic services.

Layer-pure services that depend only on:
- src/core/entities/*
- src/core/interfaces/*
- src/core/exceptions.py

NO infrastructure imports. All dependencies injected via constructor.
"""

from src.core.services.stock_availability import StockAvailabilityService
from src.core.services.stock_ledger import StockLedgerService

__all__ = [
    "StockAvailabilityService",
    "StockLedgerService",
]
