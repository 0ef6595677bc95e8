# storefront/repos/address_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.user import AddressModel


class AddressRepo:
    """Tylko odczyt - ksiazka adresowa nalezy do modulu profilu."""

    def __init__(self, db: Session):
        self.db = db

    def get_address(self, user_id: int, address_id: int) -> AddressModel | None:
        return self.db.execute(
            select(AddressModel).where(
                AddressModel.id == address_id,
                AddressModel.user_id == user_id,
            )
        ).scalar_one_or_none()
