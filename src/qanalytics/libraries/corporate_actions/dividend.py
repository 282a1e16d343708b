"""Cash dividend payments, tax classification and withholding estimates.

Formulas:
    Total Dividend = Shares Owned x Dividend Per Share
    Tax Withholding = Total Dividend x Withholding Rate

A dividend is qualified only when the action is marked qualified and the
position was held at least ``min_holding_period_days`` (61 by default)
before the ex-date.
"""

from decimal import Decimal
from typing import Sequence

from qanalytics.core.decimal_math import round_decimal
from qanalytics.core.errors import CalculationError, ErrorKind
from qanalytics.libraries.corporate_actions.fifo import apply_fifo_batch
from qanalytics.libraries.corporate_actions.models import (
    AdjustmentType,
    CashDividend,
    DividendPayment,
    TaxStatus,
    TransactionAdjustment,
    TransactionRecord,
)
from qanalytics.system.config import MIN_QUALIFIED_HOLDING_DAYS, WithholdingRates
from qanalytics.system.log_system import LoggerFactory

logger = LoggerFactory.get_logger()

CREATED_BY = "dividend_calculator"

DEFAULT_WITHHOLDING_RATES = WithholdingRates()


def calculate_dividend_payment(
    shares: Decimal,
    dividend_per_share: Decimal,
    round_to_penny: bool = False,
) -> DividendPayment | CalculationError:
    """
    Calculate the cash due on a position.

    Args:
        shares: Shares owned on the record date (>= 0)
        dividend_per_share: Cash per share (>= 0)
        round_to_penny: Round the total to 2 places (half-up)

    Returns:
        DividendPayment, or CalculationError with kind invalid_shares or
        invalid_dividend

    Example:
        >>> calculate_dividend_payment(Decimal("100"), Decimal("0.333"), round_to_penny=True).total_dividend
        Decimal('33.30')
    """
    if shares < 0:
        return CalculationError(ErrorKind.INVALID_SHARES, "Shares must be positive or zero")
    if dividend_per_share < 0:
        return CalculationError(ErrorKind.INVALID_DIVIDEND, "Dividend per share must be positive or zero")

    total = shares * dividend_per_share
    if round_to_penny:
        total = round_decimal(total, 2)

    return DividendPayment(shares_eligible=shares, dividend_per_share=dividend_per_share, total_dividend=total)


def classify_dividend_tax_status(
    qualified: bool,
    holding_period_days: int,
    min_holding_period_days: int = MIN_QUALIFIED_HOLDING_DAYS,
    return_of_capital: bool = False,
) -> TaxStatus:
    """
    Classify a dividend for tax purposes.

    Args:
        qualified: Whether the issuer marked the dividend as qualified
        holding_period_days: Days between purchase and ex-date
        min_holding_period_days: Holding requirement for qualified treatment
        return_of_capital: Distribution is a return of capital

    Returns:
        TaxStatus
    """
    if return_of_capital:
        return TaxStatus.RETURN_OF_CAPITAL
    if not qualified or holding_period_days < min_holding_period_days:
        return TaxStatus.ORDINARY
    return TaxStatus.QUALIFIED


def calculate_tax_withholding(
    total_dividend: Decimal,
    tax_status: TaxStatus,
    withholding_rate: Decimal | None = None,
    rates: WithholdingRates = DEFAULT_WITHHOLDING_RATES,
) -> Decimal:
    """
    Estimate tax withheld from a dividend.

    Args:
        total_dividend: Dividend amount
        tax_status: Classification from ``classify_dividend_tax_status``
        withholding_rate: Custom rate, overrides the per-status default
        rates: Default rates (15% qualified, 24% ordinary, 0% return of capital)

    Returns:
        Withholding amount (unrounded)
    """
    if withholding_rate is None:
        if tax_status == TaxStatus.QUALIFIED:
            withholding_rate = rates.qualified
        elif tax_status == TaxStatus.RETURN_OF_CAPITAL:
            withholding_rate = rates.return_of_capital
        else:
            withholding_rate = rates.ordinary
    return total_dividend * withholding_rate


def apply_dividend(
    transaction: TransactionRecord,
    action: CashDividend,
    round_to_penny: bool = False,
    min_holding_period_days: int = MIN_QUALIFIED_HOLDING_DAYS,
    rates: WithholdingRates = DEFAULT_WITHHOLDING_RATES,
) -> TransactionAdjustment | CalculationError:
    """Build the cash receipt adjustment for one position, with its withholding estimate."""
    payment = calculate_dividend_payment(transaction.quantity, action.dividend_per_share, round_to_penny)
    if isinstance(payment, CalculationError):
        return payment

    holding_days = (action.effective_date - transaction.purchase_date).days
    tax_status = classify_dividend_tax_status(
        action.qualified,
        holding_days,
        min_holding_period_days=min_holding_period_days,
        return_of_capital=action.return_of_capital,
    )
    tax_withheld = calculate_tax_withholding(payment.total_dividend, tax_status, rates=rates)
    if round_to_penny:
        tax_withheld = round_decimal(tax_withheld, 2)

    return TransactionAdjustment(
        transaction_id=transaction.transaction_id,
        corporate_action_id=action.action_id,
        adjustment_type=AdjustmentType.CASH_RECEIPT,
        reason=f"{action.currency or 'USD'} {action.dividend_per_share} dividend - {action.description}",
        created_by=CREATED_BY,
        original_quantity=transaction.quantity,
        adjusted_quantity=transaction.quantity,
        original_price=transaction.price,
        adjusted_price=transaction.price,
        cash_received=payment.total_dividend,
        dividend_per_share=action.dividend_per_share,
        shares_eligible=payment.shares_eligible,
        total_dividend=payment.total_dividend,
        dividend_tax_status=tax_status,
        tax_withheld=tax_withheld,
    )


def batch_apply_dividends(
    transactions: Sequence[TransactionRecord],
    action: CashDividend,
    round_to_penny: bool = False,
    min_holding_period_days: int = MIN_QUALIFIED_HOLDING_DAYS,
    rates: WithholdingRates = DEFAULT_WITHHOLDING_RATES,
) -> list[TransactionAdjustment] | CalculationError:
    """Apply a dividend to every position, oldest purchase first."""
    adjustments = apply_fifo_batch(
        transactions,
        lambda txn: apply_dividend(txn, action, round_to_penny, min_holding_period_days, rates),
        "Failed to apply dividend to some positions",
    )
    if not isinstance(adjustments, CalculationError):
        total = sum((adj.total_dividend or Decimal("0") for adj in adjustments), Decimal("0"))
        logger.info(
            "dividend.batch_applied",
            action_id=action.action_id,
            symbol=action.symbol,
            positions=len(adjustments),
            total_dividend=str(total),
        )
    return adjustments
