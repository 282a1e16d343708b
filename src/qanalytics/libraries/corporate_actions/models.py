"""Data models for corporate action processing.

Defines the records consumed and produced by the corporate action
calculators:
- TransactionRecord: Read-only purchase lot supplied by the caller
- CorporateAction: Discriminated union of supported actions (by ``kind``)
- TransactionAdjustment: Derived adjustment for the caller to persist
- SplitResult / MergerResult / SpinoffResult / DividendPayment:
  Per-position calculations
- AdjustmentPreview: Dry-run summary of an action's impact
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class ActionStatus(str, Enum):
    """Lifecycle status of a corporate action."""

    PENDING = "pending"
    APPLIED = "applied"
    REVERSED = "reversed"
    CANCELLED = "cancelled"


class AdjustmentType(str, Enum):
    """Kind of change an adjustment makes to a transaction."""

    QUANTITY_PRICE = "quantity_price"
    MERGER_STOCK_FOR_STOCK = "merger_stock_for_stock"
    MERGER_CASH_FOR_STOCK = "merger_cash_for_stock"
    MERGER_MIXED_CONSIDERATION = "merger_mixed_consideration"
    SPINOFF_ORIGINAL = "spinoff_original"
    SPINOFF_NEW_SHARES = "spinoff_new_shares"
    CASH_RECEIPT = "cash_receipt"


class TaxStatus(str, Enum):
    """Dividend tax classification."""

    QUALIFIED = "qualified"
    ORDINARY = "ordinary"
    RETURN_OF_CAPITAL = "return_of_capital"


class TransactionRecord(BaseModel):
    """
    Purchase transaction affected by a corporate action.

    Attributes:
        transaction_id: Caller's identifier for the transaction
        quantity: Shares purchased
        price: Price (cost basis) per share; optional for dividend-only use
        purchase_date: Acquisition date, drives FIFO ordering and holding period
        symbol: Optional ticker; lots for another symbol are not adjusted
    """

    transaction_id: str
    quantity: Decimal
    price: Decimal | None = None
    purchase_date: date
    symbol: str | None = None

    model_config = ConfigDict(frozen=True)


class _CorporateActionBase(BaseModel):
    """Fields shared by every corporate action."""

    action_id: str
    symbol: str
    effective_date: date  # Ex-date
    record_date: date | None = None
    pay_date: date | None = None
    description: str = ""
    source: str | None = None
    status: ActionStatus = ActionStatus.PENDING

    model_config = ConfigDict(frozen=True)


class StockSplit(_CorporateActionBase):
    """Forward or reverse split expressed as ``ratio_to`` new shares per ``ratio_from`` old."""

    kind: Literal["stock_split"] = "stock_split"
    ratio_from: Decimal
    ratio_to: Decimal


class StockMerger(_CorporateActionBase):
    """Stock-for-stock merger at a fixed exchange ratio."""

    kind: Literal["stock_merger"] = "stock_merger"
    exchange_ratio: Decimal


class CashMerger(_CorporateActionBase):
    """Cash-for-stock merger closing the position."""

    kind: Literal["cash_merger"] = "cash_merger"
    cash_per_share: Decimal


class MixedMerger(_CorporateActionBase):
    """Merger paying both acquirer shares and cash."""

    kind: Literal["mixed_merger"] = "mixed_merger"
    exchange_ratio: Decimal
    cash_per_share: Decimal


class Spinoff(_CorporateActionBase):
    """
    Spinoff of a new security to existing holders.

    ``allocation_percentage`` is the share of original basis (0-100]
    assigned to the new security.
    """

    kind: Literal["spinoff"] = "spinoff"
    new_security_id: str | None = None
    spinoff_ratio: Decimal = Decimal("1")
    allocation_percentage: Decimal = Decimal("20")


class CashDividend(_CorporateActionBase):
    """Cash distribution per share."""

    kind: Literal["cash_dividend"] = "cash_dividend"
    dividend_per_share: Decimal
    currency: str = "USD"
    qualified: bool = False
    return_of_capital: bool = False


CorporateAction = Annotated[
    Union[StockSplit, StockMerger, CashMerger, MixedMerger, Spinoff, CashDividend],
    Field(discriminator="kind"),
]

_corporate_action_adapter: TypeAdapter[Any] = TypeAdapter(CorporateAction)


def parse_corporate_action(data: dict[str, Any]) -> CorporateAction:
    """Build the right CorporateAction variant from a mapping with a ``kind`` key."""
    return _corporate_action_adapter.validate_python(data)


class TransactionAdjustment(BaseModel):
    """
    Adjustment derived from applying a corporate action to one transaction.

    Pure derived data: the caller's transaction store is responsible for
    persisting and applying it. ``transaction_id`` is None when the
    adjustment creates a new position (spinoff shares).
    """

    transaction_id: str | None
    corporate_action_id: str
    adjustment_type: AdjustmentType
    reason: str
    created_by: str

    original_quantity: Decimal = Decimal("0")
    adjusted_quantity: Decimal = Decimal("0")
    original_price: Decimal | None = None
    adjusted_price: Decimal | None = None

    gain_loss: Decimal = Decimal("0")
    cash_received: Decimal = Decimal("0")
    tax_event: bool = False
    fifo_lot_order: int | None = None
    new_security_id: str | None = None

    # Dividend receipts only
    dividend_per_share: Decimal | None = None
    shares_eligible: Decimal | None = None
    total_dividend: Decimal | None = None
    dividend_tax_status: TaxStatus | None = None
    tax_withheld: Decimal | None = None

    model_config = ConfigDict(frozen=True)


class SplitResult(BaseModel):
    """Quantity and price after a split."""

    quantity: Decimal
    price: Decimal
    split_factor: Decimal

    model_config = ConfigDict(frozen=True)


class MergerResult(BaseModel):
    """
    Position after a merger.

    ``quantity`` is 0 and ``basis_per_share`` is None for cash mergers.
    """

    quantity: Decimal
    basis_per_share: Decimal | None
    total_basis: Decimal  # Basis carried into the resulting position
    original_basis: Decimal
    cash_received: Decimal
    gain_loss: Decimal  # Recognized gain (negative for a loss)
    tax_event: bool

    model_config = ConfigDict(frozen=True)


class SpinoffResult(BaseModel):
    """Basis split between the retained position and the spun-off shares."""

    original_basis_per_share: Decimal
    original_total_basis: Decimal
    spinoff_quantity: Decimal
    spinoff_basis_per_share: Decimal
    spinoff_total_basis: Decimal
    tax_event: bool = False

    model_config = ConfigDict(frozen=True)


class DividendPayment(BaseModel):
    """Cash due on one position for a dividend."""

    shares_eligible: Decimal
    dividend_per_share: Decimal
    total_dividend: Decimal

    model_config = ConfigDict(frozen=True)


class AdjustmentPreview(BaseModel):
    """Dry-run summary of what applying an action would touch."""

    action_id: str
    kind: str
    effective_date: date
    affected_transactions: int
    estimated_adjustments: int
    transaction_ids: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)
