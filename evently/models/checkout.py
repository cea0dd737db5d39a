"""
Modèles du flux de paiement.
- CheckoutIntent: intention d'achat transitoire (jamais stockée).
- CheckoutMetadata: métadonnées {eventId, buyerId} attachées à la session Stripe.
- CompletedCheckout: données utiles extraites d'un checkout.session.completed.
"""
from decimal import Decimal, InvalidOperation
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _required_id(value: Optional[str]) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError("identifiant requis")
    return value


class CheckoutIntent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    event_id: str = Field(alias="eventId")
    event_title: str = Field(default="", alias="eventTitle")
    price: Optional[str] = None
    is_free: bool = Field(default=False, alias="isFree")
    buyer_id: str = Field(alias="buyerId")

    @field_validator("event_id", "buyer_id", mode="before")
    @classmethod
    def _ids_not_empty(cls, v):
        return _required_id(str(v) if v is not None else None)

    @field_validator("price", mode="before")
    @classmethod
    def _price_as_text(cls, v):
        # Le formulaire envoie parfois un nombre: on garde la représentation texte
        return None if v is None else str(v).strip()

    @model_validator(mode="after")
    def _price_for_paid_event(self):
        if self.is_free:
            return self
        try:
            amount = Decimal(self.price or "")
        except InvalidOperation:
            raise ValueError("price doit être un décimal valide pour un événement payant")
        if not amount.is_finite() or amount < 0:
            raise ValueError("price doit être un décimal positif ou nul")
        return self


class CheckoutMetadata(BaseModel):
    """Métadonnées Stripe validées à la frontière d'ingestion du webhook."""
    model_config = ConfigDict(populate_by_name=True)

    event_id: str = Field(alias="eventId")
    buyer_id: str = Field(alias="buyerId")

    @field_validator("event_id", "buyer_id", mode="before")
    @classmethod
    def _ids_not_empty(cls, v):
        return _required_id(v if isinstance(v, str) else None)

    def to_stripe(self) -> dict:
        return {"eventId": self.event_id, "buyerId": self.buyer_id}


class CompletedCheckout(BaseModel):
    payment_id: str
    amount_total: int = 0
    metadata: CheckoutMetadata

    @field_validator("payment_id", mode="before")
    @classmethod
    def _payment_id_not_empty(cls, v):
        return _required_id(v if isinstance(v, str) else None)

    @field_validator("amount_total", mode="before")
    @classmethod
    def _amount_default(cls, v):
        # Stripe renvoie null pour certains checkouts gratuits
        return 0 if v is None else v

    @field_validator("amount_total")
    @classmethod
    def _amount_positive(cls, v: int) -> int:
        if v < 0:
            raise ValueError("amount_total négatif")
        return v
