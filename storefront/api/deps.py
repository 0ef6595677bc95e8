# storefront/api/deps.py
from contextlib import contextmanager

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.errors import DomainError
from storefront.domain.identity import Identity
from storefront.services.inventory_service import build_dispatcher
from storefront.services.product_client import ProductClient


def get_identity(
    x_user_id: int | None = Header(None),
    x_user_role: str = Header("user"),
    x_guest_token: str | None = Header(None),
) -> Identity:
    """Tozsamosc ustawiana przez gateway; core nie weryfikuje credentiali."""
    return Identity(user_id=x_user_id, role=x_user_role, guest_token=x_guest_token)


def require_admin(identity: Identity = Depends(get_identity)) -> Identity:
    if not identity.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required.")
    return identity


def get_product_client() -> ProductClient:
    return ProductClient()


def get_inventory_dispatcher(db: Session = Depends(get_db)):
    return build_dispatcher(db)


@contextmanager
def http_errors():
    """Tlumaczy bledy domenowe na HTTPException, komunikat bez zmian."""
    try:
        yield
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
