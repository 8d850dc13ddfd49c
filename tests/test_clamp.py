from decimal import Decimal

import pytest

from relay.core.errors import InsufficientFunds
from relay.services.clamp import AmountClamper

from conftest import eth


@pytest.fixture
def clamper():
    return AmountClamper()


def test_amount_within_balance_is_untouched(clamper):
    result = clamper.clamp(eth("0.01"), eth("0.05"))
    assert result.amount_wei == eth("0.01")
    assert not result.clamped


def test_amount_reduced_to_balance_minus_reserve(clamper):
    result = clamper.clamp(eth("0.01"), eth("0.011"))
    assert result.amount_wei == eth("0.009")
    assert result.requested_wei == eth("0.01")
    assert result.clamped


@pytest.mark.parametrize("requested", ["0.5", "1", "100"])
def test_oversized_request_sends_everything_but_reserve(clamper, requested):
    result = clamper.clamp(eth(requested), eth("0.3"))
    assert result.amount_wei == eth("0.298")


def test_balance_below_reserve_reports_balance(clamper):
    with pytest.raises(InsufficientFunds) as exc_info:
        clamper.clamp(eth("0.01"), eth("0.001"))
    assert "gas" in exc_info.value.message
    assert exc_info.value.balance == Decimal("0.001")
    assert exc_info.value.code == "insufficient_funds"


def test_balance_equal_to_reserve_leaves_nothing(clamper):
    with pytest.raises(InsufficientFunds) as exc_info:
        clamper.clamp(eth("0.01"), eth("0.002"))
    assert exc_info.value.message == "Insufficient after gas reserve"
