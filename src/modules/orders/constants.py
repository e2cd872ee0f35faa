"""Order domain constants.

Status and payment choices plus the status groups the lifecycle rules
refer to.
"""

from decimal import Decimal

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    CONFIRMED = "confirmed", "Confirmed"
    PREPARING = "preparing", "Preparing"
    EN_ROUTE = "en_route", "En route"
    DELIVERED = "delivered", "Delivered"
    CANCELLED = "cancelled", "Cancelled"


class PaymentMethod(models.TextChoices):
    CASH = "cash", "Cash"
    CARD = "card", "Card"
    YAPE = "yape", "Yape"
    PLIN = "plin", "Plin"
    OTHER = "other", "Other"


# Orders in these states keep their courier busy and block its deletion.
ACTIVE_STATES: frozenset[str] = frozenset(
    {OrderStatus.CONFIRMED, OrderStatus.PREPARING, OrderStatus.EN_ROUTE}
)

# Assigning a courier moves these states straight to en route.
AUTO_ADVANCE_STATES: frozenset[str] = frozenset(
    {OrderStatus.CONFIRMED, OrderStatus.PREPARING}
)

MIN_RATING = 1
MAX_RATING = 5

CANCELLED_NOTE_PREFIX = "[Cancelled]"

ORDER_NUMBER_MAX_RETRIES = 5

# Money columns are Decimal(10, 2).
MONEY_MAX_DIGITS = 10
MONEY_DECIMAL_PLACES = 2
MAX_MONEY_AMOUNT = Decimal("99999999.99")

MAX_ITEM_QUANTITY = 999
