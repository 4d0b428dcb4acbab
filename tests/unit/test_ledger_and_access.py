import logging

import pytest

from vestvault.access_control import AccessPolicy, Action, OwnerAccessPolicy, RoleAccessPolicy
from vestvault.exceptions import LedgerError, UnauthorizedError
from vestvault.ledger import InMemoryTokenLedger, TransferRecord


class TestInMemoryTokenLedger:
    def test_credit_and_balance(self):
        ledger = InMemoryTokenLedger({"0xvault": 50})
        ledger.credit("0xvault", 25)
        assert ledger.balance_of("0xvault") == 75
        assert ledger.balance_of("0xnobody") == 0

    def test_transfer_moves_balances(self):
        ledger = InMemoryTokenLedger({"0xvault": 100})
        assert ledger.transfer("0xvault", "0xalice", 40) is True
        assert ledger.balance_of("0xvault") == 60
        assert ledger.balance_of("0xalice") == 40
        assert ledger.transfers == [TransferRecord("0xvault", "0xalice", 40)]

    def test_insufficient_balance_is_all_or_nothing(self):
        ledger = InMemoryTokenLedger({"0xvault": 10})
        assert ledger.transfer("0xvault", "0xalice", 11) is False
        assert ledger.balance_of("0xvault") == 10
        assert ledger.balance_of("0xalice") == 0
        assert ledger.transfers == []

    def test_zero_transfer_succeeds(self):
        ledger = InMemoryTokenLedger()
        assert ledger.transfer("0xvault", "0xalice", 0) is True

    @pytest.mark.parametrize("amount", [-1, 1.5, True])
    def test_invalid_amounts(self, amount):
        ledger = InMemoryTokenLedger({"0xvault": 10})
        with pytest.raises(LedgerError):
            ledger.transfer("0xvault", "0xalice", amount)
        with pytest.raises(LedgerError):
            ledger.credit("0xvault", amount)

    def test_missing_addresses(self):
        ledger = InMemoryTokenLedger({"0xvault": 10})
        with pytest.raises(LedgerError):
            ledger.transfer("0xvault", "", 1)
        with pytest.raises(LedgerError):
            ledger.credit("", 1)


class TestOwnerAccessPolicy:
    def test_owner_is_authorized_for_every_action(self):
        policy = OwnerAccessPolicy("0xOwner")
        assert policy.owner == "0xowner"
        for action in Action:
            assert policy.is_authorized("0xowner", action)
        assert isinstance(policy, AccessPolicy)

    def test_denial_is_logged(self, caplog):
        policy = OwnerAccessPolicy("0xowner")
        with caplog.at_level(logging.WARNING, logger="vestvault.access_control"):
            assert not policy.is_authorized("0xmallory", Action.CLAIM)
        assert any(getattr(r, "event", None) == "access_control.denied" for r in caplog.records)

    def test_empty_owner_rejected(self):
        with pytest.raises(ValueError):
            OwnerAccessPolicy("  ")

    def test_transfer_ownership(self):
        policy = OwnerAccessPolicy("0xowner")
        with pytest.raises(UnauthorizedError):
            policy.transfer_ownership("0xmallory", "0xmallory")
        policy.transfer_ownership("0xowner", "0xNEW")
        assert policy.owner == "0xnew"
        assert policy.is_authorized("0xnew", Action.ADD_SCHEDULE)
        assert not policy.is_authorized("0xowner", Action.ADD_SCHEDULE)

    def test_transfer_ownership_to_empty_rejected(self):
        policy = OwnerAccessPolicy("0xowner")
        with pytest.raises(ValueError):
            policy.transfer_ownership("0xowner", "")
        assert policy.owner == "0xowner"

    def test_renounce_ownership(self):
        policy = OwnerAccessPolicy("0xowner")
        policy.renounce_ownership("0xowner")
        assert policy.owner is None
        assert not policy.is_authorized("0xowner", Action.CLAIM)
        with pytest.raises(UnauthorizedError):
            policy.transfer_ownership("0xowner", "0xowner")


class TestRoleAccessPolicy:
    def test_grant_and_revoke(self):
        policy = RoleAccessPolicy()
        assert not policy.is_authorized("0xops", Action.CLAIM)
        policy.grant(Action.CLAIM, "0xOps")
        assert policy.is_authorized("0xops", Action.CLAIM)
        assert not policy.is_authorized("0xops", Action.ADD_SCHEDULE)
        policy.revoke(Action.CLAIM, "0xops")
        assert not policy.is_authorized("0xops", Action.CLAIM)

    def test_grant_empty_address_rejected(self):
        with pytest.raises(ValueError):
            RoleAccessPolicy().grant(Action.CLAIM, "")
