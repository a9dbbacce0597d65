"""Functional areas of an operation that permissions are scoped to."""

from enum import StrEnum


class Module(StrEnum):
    """Permission modules."""

    DASHBOARD = "dashboard"
    ORDERS = "orders"
    PRODUCTS = "products"
    ADS = "ads"
    INTEGRATIONS = "integrations"
    SETTINGS = "settings"
    TEAM = "team"
