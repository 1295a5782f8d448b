from .base import Record
from .catalog import Attribute, Catalog, CatalogItem, Lot, Product, Variant
from .documents import (
    CartItem, Expense, Invoice, PaymentSplit, Purchase, PurchaseItem,
    ReceiptEntry, ReceiptItem, ReturnHistoryEntry, ReturnItem, StockAdjustment,
)
from .ledger import LedgerEntry
from .parties import Customer, Role, Supplier, User
from .registers import RegisterSession
from .state import Settings, StoreState

__all__ = [
    'Record',
    'Attribute', 'Catalog', 'CatalogItem', 'Lot', 'Product', 'Variant',
    'CartItem', 'Expense', 'Invoice', 'PaymentSplit', 'Purchase', 'PurchaseItem',
    'ReceiptEntry', 'ReceiptItem', 'ReturnHistoryEntry', 'ReturnItem', 'StockAdjustment',
    'LedgerEntry',
    'Customer', 'Role', 'Supplier', 'User',
    'RegisterSession',
    'Settings', 'StoreState',
]
