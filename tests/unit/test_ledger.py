"""Unit tests for the token ledger."""

from decimal import Decimal

import pytest

from src.core.errors import (
    InsufficientBalanceError,
    InvalidAmountError,
    NotFoundError,
    UnsupportedAssetError,
)
from src.schemas.trading import Asset
from src.services.ledger import TokenLedger, require_positive, to_decimal


@pytest.fixture
def ledger() -> TokenLedger:
    ledger = TokenLedger([Asset.USDC, Asset.ETH])
    ledger.open_account("alice")
    return ledger


class TestAmounts:
    def test_to_decimal_avoids_float_noise(self):
        assert to_decimal(0.1) == Decimal("0.1")

    def test_to_decimal_rejects_garbage(self):
        with pytest.raises(InvalidAmountError):
            to_decimal("lots")

    @pytest.mark.parametrize("amount", [0, -1, "-0.5", "NaN", "Infinity"])
    def test_require_positive_rejects(self, amount):
        with pytest.raises(InvalidAmountError):
            require_positive(amount)


class TestParseAsset:
    def test_normalizes_case_and_whitespace(self, ledger):
        assert ledger.parse_asset(" usdc ") == Asset.USDC

    def test_unknown_symbol(self, ledger):
        with pytest.raises(UnsupportedAssetError):
            ledger.parse_asset("DOGE")

    def test_known_but_unconfigured_symbol(self, ledger):
        with pytest.raises(UnsupportedAssetError):
            ledger.parse_asset("BTC")


class TestBalances:
    def test_new_account_is_zero_everywhere(self, ledger):
        assert ledger.balances("alice") == {Asset.USDC: Decimal("0"), Asset.ETH: Decimal("0")}

    def test_deposit_tracks_free_and_deposited(self, ledger):
        ledger.deposit("alice", Asset.USDC, Decimal("100"))
        ledger.deposit("alice", Asset.USDC, Decimal("50"))

        assert ledger.balance("alice", Asset.USDC) == Decimal("150")
        assert ledger.deposited("alice")[Asset.USDC] == Decimal("150")

    def test_debit_never_goes_negative(self, ledger):
        ledger.deposit("alice", Asset.USDC, Decimal("10"))

        with pytest.raises(InsufficientBalanceError, match="Have: 10, Need: 11"):
            ledger.debit("alice", Asset.USDC, Decimal("11"))
        assert ledger.balance("alice", Asset.USDC) == Decimal("10")

    def test_credit_does_not_count_as_deposit(self, ledger):
        ledger.credit("alice", Asset.ETH, Decimal("2"))

        assert ledger.balance("alice", Asset.ETH) == Decimal("2")
        assert ledger.total_deposited(Asset.ETH) == Decimal("0")

    def test_balances_returns_a_copy(self, ledger):
        balances = ledger.balances("alice")
        balances[Asset.USDC] = Decimal("1000000")

        assert ledger.balance("alice", Asset.USDC) == Decimal("0")

    def test_unknown_account(self, ledger):
        with pytest.raises(NotFoundError):
            ledger.balances("mallory")

    def test_totals_across_accounts(self, ledger):
        ledger.open_account("bob")
        ledger.deposit("alice", Asset.USDC, Decimal("5"))
        ledger.deposit("bob", Asset.USDC, Decimal("7"))

        assert ledger.total_free(Asset.USDC) == Decimal("12")
        assert ledger.total_deposited(Asset.USDC) == Decimal("12")
