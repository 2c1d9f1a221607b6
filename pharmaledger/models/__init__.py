# FILE: pharmaledger/models/__init__.py
from .catalog import Category, Unit, Product
from .partners import Supplier, Customer, Salesman, Employee, EmployeePosition, TrackingStatus
from .inventory import InventoryBatch, StockTransaction, NumberSeries, MovementType
from .purchasing import PurchaseOrder, PurchaseOrderItem, POStatus
from .sales import SalesOrder, SalesOrderItem, SalesOrderStatusLog, SOStatus
from .discounts import DiscountRule, DiscountType
from .stock_transfer import (
    StockTransfer, StockTransferItem, TransferType, TransferStatus, PartnerType, ReferenceType
)

__all__ = [
    "Category",
    "Unit",
    "Product",
    "Supplier",
    "Customer",
    "Salesman",
    "Employee",
    "EmployeePosition",
    "TrackingStatus",
    "InventoryBatch",
    "StockTransaction",
    "NumberSeries",
    "MovementType",
    "PurchaseOrder",
    "PurchaseOrderItem",
    "POStatus",
    "SalesOrder",
    "SalesOrderItem",
    "SalesOrderStatusLog",
    "SOStatus",
    "DiscountRule",
    "DiscountType",
    "StockTransfer",
    "StockTransferItem",
    "TransferType",
    "TransferStatus",
    "PartnerType",
    "ReferenceType",
]
