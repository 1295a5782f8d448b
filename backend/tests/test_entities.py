# Overview: Pytest coverage for collection maintenance, expenses, settings and PIN login.

import pytest

from retailpos.domain import Supplier
from retailpos.services import entity_service
from retailpos.services.auth_service import AuthenticationError, hash_pin, verify_pin
from retailpos.services.entity_service import COLLECTIONS, CollectionKind
from retailpos.validation import ConflictError, InvalidArgumentError, NotFoundError


class TestCollections:
    def test_every_kind_has_a_collection(self, state):
        assert set(COLLECTIONS) == set(CollectionKind)
        for kind in CollectionKind:
            assert isinstance(getattr(state, COLLECTIONS[kind].attribute), list)

    def test_add_numbers_missing_ids(self, processor):
        supplier = processor.add_entity("suppliers", {"name": "Nadia", "business_name": "Fresh Co"})
        assert supplier.id == "S-000001"
        assert processor.state.supplier("S-000001").display_name == "Fresh Co"

    def test_add_accepts_records(self, processor):
        processor.add_entity(CollectionKind.SUPPLIERS, Supplier(id="s-9", name="Zed"))
        assert processor.state.supplier("s-9").name == "Zed"

    def test_added_record_is_a_copy(self, processor):
        original = Supplier(id="s-9", name="Zed")
        processor.add_entity("suppliers", original)
        original.name = "Changed"
        assert processor.state.supplier("s-9").name == "Zed"

    def test_duplicate_id_conflicts(self, processor):
        with pytest.raises(ConflictError):
            processor.add_entity("customers", {"id": "c-1", "name": "Another Alice"})
        assert len(processor.state.customers) == 1

    def test_update_replaces_whole_record(self, processor):
        processor.state.customer("c-1").loyalty_points = 99
        updated = processor.update_entity("customers", {"id": "c-1", "name": "Alice B."})
        assert updated.name == "Alice B."
        assert updated.loyalty_points == 0
        assert processor.state.customer("c-1") is updated

    def test_update_missing(self, processor):
        with pytest.raises(NotFoundError):
            processor.update_entity("customers", {"id": "c-404", "name": "Nobody"})

    def test_delete(self, processor):
        removed = processor.delete_entity("products", "p-1")
        assert removed.id == "p-1"
        assert processor.state.product("p-1") is None
        with pytest.raises(NotFoundError):
            processor.delete_entity("products", "p-1")

    def test_unknown_kind(self, processor):
        with pytest.raises(InvalidArgumentError):
            processor.add_entity("invoices", {"id": "x"})

    def test_missing_required_field(self, processor):
        with pytest.raises(InvalidArgumentError):
            processor.add_entity("customers", {"phone": "555"})

    def test_user_update_keeps_pin(self, processor):
        processor.register_user("admin@pos.local", "1234")
        pin_hash = processor.state.user("u-1").pin_hash

        processor.update_entity("users", {"id": "u-1", "name": "Boss", "email": "admin@pos.local",
                                          "role": "Admin", "pin_hash": "forged"})
        assert processor.state.user("u-1").pin_hash == pin_hash

    def test_deleting_current_user_logs_out(self, processor):
        processor.register_user("admin@pos.local", "1234")
        processor.login("admin@pos.local", "1234")
        processor.delete_entity("users", "u-1")
        assert processor.state.current_user_id is None

    def test_service_rejects_non_mapping(self, state):
        with pytest.raises(InvalidArgumentError):
            entity_service.add_entity(state, CollectionKind.ROLES, ["not", "a", "record"])


class TestExpenses:
    def test_paid_expense_posts_two_legs(self, processor):
        expense = processor.record_expense({"title": "Electricity", "category": "Utilities", "amount_cents": 12000})

        debit, credit = processor.state.ledger
        assert (debit.type, debit.account_id, debit.account_name) == ("DEBIT", "EXPENSE", "Utilities")
        assert (credit.type, credit.account_id) == ("CREDIT", "CASH")
        assert debit.amount_cents == credit.amount_cents == 12000
        assert debit.category == credit.category == "EXPENSE"
        assert debit.reference_id == expense.id

    def test_pending_expense_posts_nothing(self, processor):
        processor.record_expense({"title": "Rent", "category": "Rent", "amount_cents": 80000, "status": "Pending"})
        assert len(processor.state.expenses) == 1
        assert processor.state.ledger == []

    def test_bad_status(self, processor):
        with pytest.raises(InvalidArgumentError):
            processor.record_expense({"title": "Rent", "category": "Rent", "amount_cents": 1, "status": "Maybe"})


class TestSettings:
    def test_update(self, processor):
        settings = processor.update_settings(shop_name="Corner Shop", tax_rate=8.5)
        assert settings.shop_name == "Corner Shop"
        assert processor.state.settings.tax_rate == 8.5

    def test_unknown_key(self, processor):
        with pytest.raises(InvalidArgumentError):
            processor.update_settings(favourite_colour="teal")

    def test_bad_theme(self, processor):
        with pytest.raises(InvalidArgumentError):
            processor.update_settings(theme_mode="neon")
        assert processor.state.settings.theme_mode == "light"


class TestPinLogin:
    def test_hash_roundtrip(self):
        pin_hash = hash_pin("4321")
        assert pin_hash != "4321"
        assert verify_pin("4321", pin_hash)
        assert not verify_pin("1234", pin_hash)

    @pytest.mark.parametrize("pin", ["12", "abcd", "123456789", None])
    def test_pin_format(self, pin):
        with pytest.raises(InvalidArgumentError):
            hash_pin(pin)

    def test_login_stamps_ledger_entries(self, processor):
        processor.register_user("admin@pos.local", "1234")
        user = processor.login("ADMIN@pos.local", "1234")
        assert processor.state.current_user_id == user.id

        processor.open_register(100)
        assert processor.state.ledger[-1].user_name == "Admin User"

        processor.logout()
        processor.close_register(100)
        processor.open_register(100)
        assert processor.state.ledger[-1].user_id == "sys"
        assert processor.state.ledger[-1].user_name == "System"

    def test_register_creates_cashier(self, processor):
        user = processor.register_user("new@pos.local", "5555")
        assert user.role == "Cashier"
        assert user.name == "new"
        assert "pin_hash" not in user.to_public_dict()

    def test_wrong_pin(self, processor):
        processor.register_user("admin@pos.local", "1234")
        with pytest.raises(AuthenticationError):
            processor.login("admin@pos.local", "9999")
        assert processor.state.current_user_id is None

    def test_user_without_pin_cannot_login(self, processor):
        with pytest.raises(AuthenticationError):
            processor.login("admin@pos.local", "1234")
