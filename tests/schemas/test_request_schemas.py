"""Request Schemas — boundary validation for registration and withdrawals."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from earnledger.core.domain_types import WithdrawalNetwork, WithdrawalStatus
from earnledger.schemas.referral import ReferralSettingUpsert
from earnledger.schemas.user import RegisterRequest
from earnledger.schemas.withdrawal import WithdrawalCreate, WithdrawalDecision


def _register(**overrides) -> dict:
    data = {
        "username": "bob", "email": "bob@example.com", "password": "hunter22",
        "country": "BRA", "phone": "555-0101",
    }
    data.update(overrides)
    return data


def test_register_strips_text_fields():
    req = RegisterRequest(**_register(username="  bob  ", country=" BRA "))
    assert req.username == "bob"
    assert req.country == "BRA"


def test_register_rejects_whitespace_username():
    with pytest.raises(ValidationError):
        RegisterRequest(**_register(username="     "))


def test_register_rejects_short_password():
    with pytest.raises(ValidationError):
        RegisterRequest(**_register(password="123"))


def test_referral_code_optional():
    assert RegisterRequest(**_register()).referral_code is None


def test_withdrawal_amount_positive_and_two_places():
    assert WithdrawalCreate(
        amount="20.50", wallet_address="TX", network="TRC20",
    ).amount == Decimal("20.50")
    with pytest.raises(ValidationError):
        WithdrawalCreate(amount="0", wallet_address="TX", network="TRC20")
    with pytest.raises(ValidationError):
        WithdrawalCreate(amount="1.001", wallet_address="TX", network="TRC20")


def test_withdrawal_network_is_enum():
    req = WithdrawalCreate(amount="20", wallet_address="0xabc", network="ERC20")
    assert req.network is WithdrawalNetwork.ERC20
    with pytest.raises(ValidationError):
        WithdrawalCreate(amount="20", wallet_address="0xabc", network="BTC")


def test_withdrawal_decision_parses_status():
    assert WithdrawalDecision(status="approved").status is WithdrawalStatus.APPROVED


def test_referral_setting_default_minimum():
    setting = ReferralSettingUpsert(country="BRA", reward_amount="1.25")
    assert setting.min_withdrawal == Decimal("20")
