from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .base import Record
from .catalog import Catalog, Product, Variant
from .documents import Expense, Invoice, Purchase, StockAdjustment
from .ledger import LedgerEntry
from .parties import Customer, Role, Supplier, User
from .registers import RegisterSession

SNAPSHOT_VERSION = 1


@dataclass
class Settings(Record):
    currency: str = "PKR"
    currency_symbol: str = "Rs"
    tax_rate: float = 10
    shop_name: str = "My POS Store"
    address: str = ""
    phone: str = ""
    email: str = ""
    theme_mode: str = "light"
    accent_color: str = "blue"
    logo: Optional[str] = None


@dataclass
class StoreState(Record):
    """
    Every aggregate the store owns, as one unit.

    This is the full snapshot the persistence gate writes after each command
    and loads at startup. Only CommerceEventProcessor mutates it.
    """
    products: list = field(default_factory=list)
    catalogs: list = field(default_factory=list)
    suppliers: list = field(default_factory=list)
    customers: list = field(default_factory=list)
    users: list = field(default_factory=list)
    roles: list = field(default_factory=list)
    expenses: list = field(default_factory=list)
    invoices: list = field(default_factory=list)
    purchases: list = field(default_factory=list)
    ledger: list = field(default_factory=list)
    stock_adjustments: list = field(default_factory=list)
    settings: Settings = field(default_factory=Settings)
    register_session: Optional[RegisterSession] = None
    current_user_id: Optional[str] = None
    sequences: dict = field(default_factory=dict)
    version: int = SNAPSHOT_VERSION

    _nested = {
        "products": Product,
        "catalogs": Catalog,
        "suppliers": Supplier,
        "customers": Customer,
        "users": User,
        "roles": Role,
        "expenses": Expense,
        "invoices": Invoice,
        "purchases": Purchase,
        "ledger": LedgerEntry,
        "stock_adjustments": StockAdjustment,
        "settings": Settings,
        "register_session": RegisterSession,
    }

    @classmethod
    def initial(cls) -> "StoreState":
        """Empty store with the default roles."""
        return cls(roles=[
            Role(id="r-1", name="Admin", permissions=["ALL"]),
            Role(id="r-2", name="Cashier", permissions=["POS", "CUSTOMERS", "DASHBOARD"]),
        ])

    @classmethod
    def demo(cls) -> "StoreState":
        """Initial store plus a small demo catalog, for local development."""
        state = cls.initial()
        for i in range(6):
            product = Product(
                id=f"p-{i}",
                name=f"Premium Item {i}" if i % 3 == 0 else f"Standard Item {i}",
                sku=f"SKU-{1000 + i}",
                category=["Electronics", "Apparel", "Home", "Beauty"][i % 4],
                price_cents=4999 + i * 1000,
                cost_price_cents=2000 + i * 500,
                stock=20 + i,
                min_stock_level=10,
            )
            if i % 3 == 0:
                product.variants = [
                    Variant(id=f"v-{i}-1", name="Small", sku=f"SKU-{i}-S", price_cents=product.price_cents, stock=10),
                    Variant(id=f"v-{i}-2", name="Large", sku=f"SKU-{i}-L", price_cents=product.price_cents + 1000, stock=5),
                ]
            state.products.append(product)
        state.suppliers = [
            Supplier(id="s-1", name="John Doe", business_name="Acme Corp"),
            Supplier(id="s-2", name="Jane Smith", business_name="Global Foods", balance_cents=50000),
        ]
        state.customers = [
            Customer(id=f"c-{i}", name=f"Customer {i + 1}", loyalty_points=i * 50) for i in range(3)
        ]
        state.users = [
            User(id="u-1", name="Admin User", email="admin@pos.local", role="Admin"),
            User(id="u-2", name="Staff User", email="staff@pos.local", role="Cashier"),
        ]
        return state

    # -- lookups -------------------------------------------------------------

    def product(self, product_id: str) -> Product | None:
        return next((p for p in self.products if p.id == product_id), None)

    def catalog(self, catalog_id: str) -> Catalog | None:
        return next((c for c in self.catalogs if c.id == catalog_id), None)

    def supplier(self, supplier_id: str) -> Supplier | None:
        return next((s for s in self.suppliers if s.id == supplier_id), None)

    def customer(self, customer_id: str) -> Customer | None:
        return next((c for c in self.customers if c.id == customer_id), None)

    def customer_by_name(self, name: str) -> Customer | None:
        return next((c for c in self.customers if c.name == name), None)

    def user(self, user_id: str) -> User | None:
        return next((u for u in self.users if u.id == user_id), None)

    def invoice(self, invoice_id: str) -> Invoice | None:
        return next((i for i in self.invoices if i.id == invoice_id), None)

    def purchase(self, purchase_id: str) -> Purchase | None:
        return next((p for p in self.purchases if p.id == purchase_id), None)

    @property
    def current_user(self) -> User | None:
        if self.current_user_id is None:
            return None
        return self.user(self.current_user_id)
