# FILE: pharmaledger/api/router.py
from fastapi import APIRouter
from pharmaledger.api import (
    # Masters
    routes_catalog,
    routes_partners,

    # Stock
    routes_inventory,
    routes_stock_transfers,

    # Orders
    routes_discounts,
    routes_purchase_orders,
    routes_sales_orders,
)

api_router = APIRouter()

api_router.include_router(routes_catalog.router)
api_router.include_router(routes_partners.router)
api_router.include_router(routes_inventory.router)
api_router.include_router(routes_stock_transfers.router)
api_router.include_router(routes_discounts.router)
api_router.include_router(routes_purchase_orders.router)
api_router.include_router(routes_sales_orders.router)
