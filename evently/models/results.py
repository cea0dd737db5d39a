"""
Objets résultat des cas d'usage (checkout, webhook, reporting).
Les services ne lèvent pas d'exception métier: ils renvoient un résultat explicite
que la vue traduit en réponse HTTP, sans analyser de message d'erreur.
"""
from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    CONFIGURATION = "configuration"
    SIGNATURE = "signature"
    MALFORMED_PAYLOAD = "malformed_payload"
    VALIDATION = "validation"
    UPSTREAM = "upstream"


class ServiceError:
    def __init__(self, kind: ErrorKind, message: str):
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return f"ServiceError({self.kind.value!r}, {self.message!r})"


class ServiceResult:
    """Résultat générique: success + value, ou error (ServiceError)."""

    def __init__(self, success: bool, value: Any = None, error: Optional[ServiceError] = None):
        self.success = success
        self.value = value
        self.error = error

    @classmethod
    def ok(cls, value: Any = None) -> "ServiceResult":
        return cls(True, value=value)

    @classmethod
    def fail(cls, kind: ErrorKind, message: str) -> "ServiceResult":
        return cls(False, error=ServiceError(kind, message))

    @property
    def error_kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error else None


class WebhookStatus(str, Enum):
    CREATED = "created"
    DUPLICATE = "duplicate"
    IGNORED = "ignored"
    REJECTED = "rejected"
    FAILED = "failed"


class WebhookResult:
    """
    Issue du traitement d'une notification Stripe.
    - CREATED / DUPLICATE / IGNORED: acquittées (200), la passerelle ne relivre pas.
    - REJECTED: signature ou payload invalide (400).
    - FAILED: store injoignable (503), la passerelle pourra relivrer.
    """

    def __init__(self, status: WebhookStatus, order=None, event_type: Optional[str] = None, error: Optional[ServiceError] = None):
        self.status = status
        self.order = order
        self.event_type = event_type
        self.error = error

    @classmethod
    def created(cls, order) -> "WebhookResult":
        return cls(WebhookStatus.CREATED, order=order, event_type="checkout.session.completed")

    @classmethod
    def duplicate(cls, order) -> "WebhookResult":
        return cls(WebhookStatus.DUPLICATE, order=order, event_type="checkout.session.completed")

    @classmethod
    def ignored(cls, event_type: Optional[str]) -> "WebhookResult":
        return cls(WebhookStatus.IGNORED, event_type=event_type)

    @classmethod
    def rejected(cls, kind: ErrorKind, message: str) -> "WebhookResult":
        return cls(WebhookStatus.REJECTED, error=ServiceError(kind, message))

    @classmethod
    def failed(cls, kind: ErrorKind, message: str) -> "WebhookResult":
        return cls(WebhookStatus.FAILED, error=ServiceError(kind, message))

    @property
    def acknowledged(self) -> bool:
        return self.status in (WebhookStatus.CREATED, WebhookStatus.DUPLICATE, WebhookStatus.IGNORED)

    @property
    def http_status(self) -> int:
        if self.acknowledged:
            return 200
        if self.status == WebhookStatus.REJECTED:
            return 400
        return 503

    def to_response(self) -> dict:
        if not self.acknowledged:
            return {"detail": self.error.message if self.error else "Erreur webhook"}
        body: dict = {"status": self.status.value}
        if self.order is not None:
            body["order"] = self.order.to_public()
        if self.status == WebhookStatus.IGNORED:
            body["type"] = self.event_type
        return body
