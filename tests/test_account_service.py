"""Tests for the account service (chart of accounts registry)."""

import pytest
from datetime import date
from decimal import Decimal

from tallybook.domain.account import AccountService, normalize_code, parse_account_type
from tallybook.domain.entities import AccountType, LineInput, NormalBalance, TransactionStatus
from tallybook.domain.errors import ConflictError, NotFoundError, ValidationError
from tallybook.utils.account_resolver import resolve_account


class TestCreateAccount:
    """Tests for account creation."""

    def test_create_uses_type_default_side(self, account_service):
        account_id = account_service.create_account(code="4010", name="Consulting", account_type="revenue")
        acc = account_service.get_account(account_id)

        assert acc.type == AccountType.REVENUE
        assert acc.normal_balance == NormalBalance.CREDIT
        assert acc.is_active is True
        assert acc.parent_id is None

    def test_create_with_override_and_category(self, account_service):
        account_id = account_service.create_account(
            code="3020",
            name="Owner Drawings",
            account_type=AccountType.EQUITY,
            normal_balance="debit",
            category="capital",
            description="Money taken out by the owner",
        )
        acc = account_service.get_account(account_id)

        assert acc.normal_balance == NormalBalance.DEBIT
        assert acc.category == "capital"
        assert acc.description == "Money taken out by the owner"

    def test_code_is_normalized(self, account_service):
        account_service.create_account(code=" ab-1 ", name="Petty Cash", account_type="asset")
        assert account_service.get_account_by_code("AB-1").name == "Petty Cash"
        assert account_service.get_account_by_code("ab-1") is not None

    def test_duplicate_code(self, account_service):
        account_service.create_account(code="1020", name="Checking", account_type="asset")
        with pytest.raises(ConflictError, match="already exists") as excinfo:
            account_service.create_account(code="1020", name="Other", account_type="asset")
        assert excinfo.value.details == {"code": "1020"}

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"code": "", "name": "Cash", "account_type": "asset"},
            {"code": "1010", "name": "  ", "account_type": "asset"},
            {"code": "1010", "name": "Cash", "account_type": "gold"},
            {"code": "1010", "name": "Cash", "account_type": "asset", "normal_balance": "sideways"},
        ],
    )
    def test_invalid_input(self, account_service, kwargs):
        with pytest.raises(ValidationError):
            account_service.create_account(**kwargs)
        assert account_service.list_accounts() == []

    def test_unknown_parent(self, account_service):
        with pytest.raises(NotFoundError):
            account_service.create_account(code="1010", name="Cash", account_type="asset", parent_id=42)


class TestQueries:
    """Tests for listing and the account tree."""

    def test_list_filters(self, account_service, chart):
        assert [a.code for a in account_service.list_accounts(account_type="expense")] == ["5010", "5410"]
        account_service.deactivate_account(chart["1010"])
        assert [a.code for a in account_service.list_accounts(is_active=False)] == ["1010"]
        assert len(account_service.list_accounts(is_active=True)) == 9

    def test_tree(self, account_service):
        root = account_service.create_account(code="1000", name="Assets", account_type="asset")
        child = account_service.create_account(code="1010", name="Cash", account_type="asset", parent_id=root)
        account_service.create_account(code="2000", name="Liabilities", account_type="liability")

        tree = account_service.get_account_tree()

        assert [node["code"] for node in tree] == ["1000", "2000"]
        assert tree[0]["children"][0]["id"] == child
        assert tree[0]["children"][0]["children"] == []
        assert [a.code for a in account_service.list_accounts(parent_id=root)] == ["1010"]
        assert [a.code for a in account_service.list_accounts(parent_id=None)] == ["1000", "2000"]

    def test_require_account_by_code(self, account_service):
        with pytest.raises(NotFoundError, match="'9999'"):
            account_service.require_account_by_code("9999")

    def test_parse_helpers(self):
        assert parse_account_type(" Asset ") == AccountType.ASSET
        assert normalize_code(" x1 ") == "X1"


class TestUpdateAccount:
    """Tests for updating descriptive fields."""

    def test_update_fields(self, account_service, chart):
        account_service.update_account(chart["1020"], name="Operating Checking", description="Main bank")
        acc = account_service.get_account(chart["1020"])
        assert acc.name == "Operating Checking"
        assert acc.description == "Main bank"
        assert acc.category == "current"

        account_service.update_account(chart["1020"], category=None)
        assert account_service.get_account(chart["1020"]).category is None

    def test_blank_name_rejected(self, account_service, chart):
        with pytest.raises(ValidationError):
            account_service.update_account(chart["1020"], name=" ")

    def test_parent_cycle_rejected(self, account_service):
        root = account_service.create_account(code="1000", name="Assets", account_type="asset")
        child = account_service.create_account(code="1010", name="Cash", account_type="asset", parent_id=root)
        grandchild = account_service.create_account(code="1011", name="Till", account_type="asset", parent_id=child)

        with pytest.raises(ValidationError, match="cycle"):
            account_service.update_account(root, parent_id=grandchild)
        with pytest.raises(ValidationError, match="cycle"):
            account_service.update_account(root, parent_id=root)

        account_service.update_account(grandchild, parent_id=None)
        assert account_service.get_account(grandchild).parent_id is None

    def test_update_missing(self, account_service):
        with pytest.raises(NotFoundError):
            account_service.update_account(404, name="Ghost")


class TestDeactivateAndDelete:
    """Tests for the reference guards on deactivation and deletion."""

    def test_deactivate_unused(self, account_service, chart):
        account_service.deactivate_account(chart["1010"])
        assert account_service.get_account(chart["1010"]).is_active is False
        account_service.activate_account(chart["1010"])
        assert account_service.get_account(chart["1010"]).is_active is True

    def test_deactivate_with_draft_lines(self, account_service, record, chart):
        """Draft lines also count as references."""
        record("2024-01-20", "1010", "4010", "50", status=TransactionStatus.DRAFT)
        with pytest.raises(ConflictError) as excinfo:
            account_service.deactivate_account(chart["1010"])
        assert excinfo.value.details == {"line_count": 1}
        assert account_service.get_account(chart["1010"]).is_active is True

    def test_delete_unused(self, account_service, chart):
        account_service.delete_account(chart["1210"])
        assert account_service.get_account(chart["1210"]) is None

    def test_delete_with_posted_lines(self, account_service, record, chart):
        """Deleting an account after posting against it is a conflict."""
        record("2024-01-20", "1020", "4010", "8000")

        with pytest.raises(ConflictError) as excinfo:
            account_service.delete_account(chart["1020"])

        assert excinfo.value.details == {"line_count": 1, "child_count": 0}
        assert account_service.get_account(chart["1020"]) is not None

    def test_delete_with_children(self, account_service):
        root = account_service.create_account(code="1000", name="Assets", account_type="asset")
        account_service.create_account(code="1010", name="Cash", account_type="asset", parent_id=root)

        with pytest.raises(ConflictError, match="1 child account"):
            account_service.delete_account(root)

    def test_delete_after_draft_removed(self, account_service, transaction_service, admin, chart):
        txn_id = transaction_service.create_transaction(
            admin,
            date(2024, 1, 20),
            "Mistake",
            [
                LineInput(account_id=chart["1210"], debit=Decimal("10")),
                LineInput(account_id=chart["2010"], credit=Decimal("10")),
            ],
        )
        transaction_service.delete_transaction(admin, txn_id)

        account_service.delete_account(chart["1210"])
        assert account_service.get_account(chart["1210"]) is None

    def test_delete_missing(self, account_service):
        with pytest.raises(NotFoundError):
            account_service.delete_account(404)


class TestResolveAccount:
    """Tests for resolving user input to account IDs."""

    def test_resolve_by_code_id_and_name(self, account_service, chart):
        assert resolve_account(account_service, "1020") == chart["1020"]
        assert resolve_account(account_service, f"#{chart['5010']}") == chart["5010"]
        assert resolve_account(account_service, chart["4010"]) == chart["4010"]
        assert resolve_account(account_service, "software sales") == chart["4110"]

    def test_resolve_unknown(self, account_service, chart):
        with pytest.raises(NotFoundError):
            resolve_account(account_service, "Petty cash")

    def test_service_shares_database(self, temp_db):
        assert AccountService(temp_db).list_accounts() == []
