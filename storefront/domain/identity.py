# storefront/domain/identity.py
from dataclasses import dataclass


@dataclass(frozen=True)
class Identity:
    """
    Tozsamosc dostarczona przez zewnetrznego dostawce (gateway).
    user_id None = gosc; gosc moze miec guest_token dla swojego koszyka.
    """

    user_id: int | None = None
    role: str = "user"
    guest_token: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @property
    def is_admin(self) -> bool:
        return self.is_authenticated and self.role == "admin"

    @property
    def is_anonymous(self) -> bool:
        return self.user_id is None and not self.guest_token
