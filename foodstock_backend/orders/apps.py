# orders/apps.py

"""
ORDERS APP CONFIG

Customer orders fulfilled from FEFO batch stock:
- pending orders reserve nothing; they hold pending stock-out rows
- processing an order applies every line or none
"""

from django.apps import AppConfig


class OrdersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "orders"
    verbose_name = "Orders"
