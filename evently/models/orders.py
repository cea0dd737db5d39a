"""
Modèles Order et lignes de reporting.
Les champs Python sont en snake_case; model_dump(by_alias=True) produit le camelCase
exposé aux clients (orderId, totalAmount, eventTitle, ...).
"""
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class Order(_CamelModel):
    id: Optional[str] = None
    external_payment_id: str
    event_ref: Optional[str] = None
    buyer_ref: Optional[str] = None
    total_amount: str
    created_at: datetime

    @field_validator("total_amount")
    @classmethod
    def _non_negative_decimal(cls, v: str) -> str:
        try:
            amount = Decimal(v)
        except InvalidOperation:
            raise ValueError("totalAmount doit être une chaîne décimale")
        if not amount.is_finite() or amount < 0:
            raise ValueError("totalAmount doit être positif ou nul")
        return v

    def to_public(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class OrderReportRow(_CamelModel):
    """Ligne aplatie 'commandes d'un événement' (vue organisateur)."""
    order_id: str
    total_amount: str
    created_at: datetime
    event_id: Optional[str] = None
    event_title: Optional[str] = None
    buyer: Optional[str] = None


class OrganizerSummary(_CamelModel):
    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class EventSummary(_CamelModel):
    id: str
    title: Optional[str] = None
    price: Optional[str] = None
    is_free: Optional[bool] = None
    start_date_time: Optional[datetime] = None
    end_date_time: Optional[datetime] = None
    category: Optional[str] = None
    organizer: Optional[OrganizerSummary] = None


class BuyerOrderRow(_CamelModel):
    """Commande d'un acheteur avec son événement et l'organisateur joints."""
    id: str
    external_payment_id: str
    total_amount: str
    created_at: datetime
    buyer_ref: Optional[str] = None
    event: Optional[EventSummary] = None


class BuyerOrdersPage(_CamelModel):
    data: List[BuyerOrderRow]
    total_pages: int
    page: int
    limit: int

    @property
    def out_of_range(self) -> bool:
        """Page vide alors que des pages existent: l'appelant a demandé trop loin."""
        return not self.data and self.total_pages > 0 and self.page > self.total_pages
