"""Tests for statistics primitives."""

from decimal import Decimal

from qanalytics.core.decimal_math import round_decimal
from qanalytics.core.errors import CalculationError, ErrorKind
from qanalytics.libraries.performance.statistics import (
    annualize_return,
    downside_deviation,
    excess_returns,
    geometric_mean_return,
    infer_periods_per_year,
    mean,
    sample_covariance,
    sample_std_dev,
    sample_variance,
    validate_returns,
    validate_values,
)


def d(*values: str) -> list[Decimal]:
    return [Decimal(v) for v in values]


class TestValidation:
    """Test series validation."""

    def test_valid_returns(self):
        """Test a well-formed series passes."""
        assert validate_returns(d("0.01", "-0.02")) is None

    def test_too_few_returns(self):
        """Test fewer than two returns is insufficient data."""
        error = validate_returns(d("0.01"))
        assert isinstance(error, CalculationError)
        assert error.kind == ErrorKind.INSUFFICIENT_DATA

        assert validate_returns([]).kind == ErrorKind.INSUFFICIENT_DATA

    def test_float_returns_rejected(self):
        """Test binary floats are not accepted as returns."""
        error = validate_returns([0.01, 0.02])
        assert error.kind == ErrorKind.INVALID_RETURN_FORMAT

    def test_non_finite_returns_rejected(self):
        """Test NaN and infinity are rejected."""
        assert validate_returns([Decimal("0.01"), Decimal("NaN")]).kind == ErrorKind.INVALID_RETURN_FORMAT
        assert validate_returns([Decimal("Infinity"), Decimal("0.01")]).kind == ErrorKind.INVALID_RETURN_FORMAT

    def test_mixed_types_rejected(self):
        """Test strings and None are rejected."""
        assert validate_returns([Decimal("0.01"), "0.02"]).kind == ErrorKind.INVALID_RETURN_FORMAT
        assert validate_returns([None, Decimal("0.02")]).kind == ErrorKind.INVALID_RETURN_FORMAT

    def test_values_must_be_positive(self):
        """Test zero or negative values are rejected."""
        assert validate_values(d("100", "0")).kind == ErrorKind.NON_POSITIVE_VALUES
        assert validate_values(d("100", "-5")).kind == ErrorKind.NON_POSITIVE_VALUES

    def test_values_must_be_decimal(self):
        """Test integer values are a format error."""
        assert validate_values([100, 110]).kind == ErrorKind.INVALID_VALUE_FORMAT

    def test_values_format_checked_before_sign(self):
        """Test a format error is reported even when a later value is negative."""
        assert validate_values([Decimal("-1"), 5.0]).kind == ErrorKind.INVALID_VALUE_FORMAT


class TestMoments:
    """Test mean, variance and standard deviation."""

    def test_mean(self):
        """Test arithmetic mean."""
        assert mean(d("1", "2", "3", "4")) == Decimal("2.5")

    def test_mean_empty(self):
        """Test empty series mean is zero."""
        assert mean([]) == Decimal("0")

    def test_sample_variance_uses_n_minus_one(self):
        """Test Bessel correction."""
        values = d("2", "4", "4", "4", "5", "5", "7", "9")
        assert sample_variance(values) == Decimal("32") / Decimal("7")

    def test_sample_variance_single_value(self):
        """Test variance of one value is zero."""
        assert sample_variance(d("5")) == Decimal("0")

    def test_sample_std_dev(self):
        """Test standard deviation is the root of variance."""
        result = sample_std_dev(d("1", "3"))
        assert round_decimal(result, 10) == Decimal("1.4142135624")

    def test_constant_series_has_zero_std_dev(self):
        """Test a flat series has zero dispersion."""
        assert sample_std_dev(d("0.01", "0.01", "0.01")) == Decimal("0")


class TestDownsideDeviation:
    """Test downside deviation."""

    def test_divides_by_total_count(self):
        """Test shortfalls are averaged over every return."""
        result = downside_deviation(d("-0.04", "0.04", "0.02", "0.06"))
        assert round_decimal(result, 10) == Decimal("0.02")

    def test_no_shortfall(self):
        """Test returns at or above target contribute nothing."""
        assert downside_deviation(d("0.01", "0.02", "0")) == Decimal("0")

    def test_custom_target(self):
        """Test shortfalls are measured from the target."""
        result = downside_deviation(d("0.01", "0.05"), target_return=Decimal("0.03"))
        # (0.01 - 0.03)^2 / 2 = 0.0002
        assert round_decimal(result * result, 10) == Decimal("0.0002")


class TestCovariance:
    """Test sample covariance."""

    def test_covariance(self):
        """Test covariance of proportional series."""
        assert sample_covariance(d("0.01", "0.02", "0.03"), d("0.02", "0.04", "0.06")) == Decimal("0.0002")

    def test_covariance_of_series_with_itself_is_variance(self):
        """Test cov(x, x) equals var(x)."""
        values = d("0.05", "-0.01", "0.03")
        assert sample_covariance(values, values) == sample_variance(values)


class TestCompounding:
    """Test geometric mean and annualization."""

    def test_geometric_mean(self):
        """Test constant growth gives the per-period rate."""
        assert round_decimal(geometric_mean_return(d("0.1", "0.1")), 10) == Decimal("0.1")

    def test_geometric_mean_total_loss(self):
        """Test a -100% period gives -1."""
        assert geometric_mean_return(d("0.2", "-1")) == Decimal("-1")

    def test_annualize_return(self):
        """Test monthly compounding."""
        expected = Decimal("1.01") ** 12 - 1
        assert annualize_return(Decimal("0.01"), 12) == expected

    def test_infer_periods_per_year(self):
        """Test period grain thresholds."""
        assert infer_periods_per_year(252) == 252
        assert infer_periods_per_year(250) == 252
        assert infer_periods_per_year(249) == 52
        assert infer_periods_per_year(50) == 52
        assert infer_periods_per_year(49) == 12
        assert infer_periods_per_year(10) == 12
        assert infer_periods_per_year(9) == 4
        assert infer_periods_per_year(2) == 4


def test_excess_returns():
    """Test pairwise differences."""
    assert excess_returns(d("0.05", "0.03"), d("0.04", "0.04")) == d("0.01", "-0.01")
