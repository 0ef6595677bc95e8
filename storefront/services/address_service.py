# storefront/services/address_service.py
from dataclasses import dataclass, asdict
from typing import Any, Dict

from sqlalchemy.orm import Session

from storefront.domain.errors import AddressNotFound, MissingShippingInfo
from storefront.domain.identity import Identity
from storefront.repos.address_repo import AddressRepo

_ADDRESS_FIELDS = ("username", "phone", "address", "city", "region", "district", "landmark", "ship_to")


@dataclass(frozen=True)
class ShippingAddress:
    username: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    region: str | None = None
    district: str | None = None
    landmark: str | None = None
    ship_to: str | None = None

    def to_columns(self) -> Dict[str, Any]:
        """Mapowanie na kolumny ship_* zamowienia."""
        columns = {f"ship_{k}": v for k, v in asdict(self).items() if k != "ship_to"}
        columns["ship_to"] = self.ship_to
        return columns


class AddressResolver:
    def __init__(self, db: Session):
        self.repo = AddressRepo(db)

    def resolve(self, identity: Identity, address_id: int | None = None, inline=None) -> ShippingAddress:
        """
        Adres z ksiazki adresowej (po id) albo kopia adresu podanego w requescie.
        Gdy podane oba, wygrywa address_id. Inline nie trafia do ksiazki adresowej.
        """
        if address_id is None and inline is None:
            raise MissingShippingInfo()

        if address_id is not None:
            # gosc nie ma ksiazki adresowej
            entry = None
            if identity.user_id is not None:
                entry = self.repo.get_address(identity.user_id, address_id)
            if entry is None:
                raise AddressNotFound()

            return ShippingAddress(
                username=entry.name,
                phone=entry.phone,
                address=entry.address,
                city=entry.city,
                region=entry.region,
                district=entry.district,
                landmark=entry.landmark,
                ship_to=entry.ship_to,
            )

        if hasattr(inline, "model_dump"):
            inline = inline.model_dump()

        return ShippingAddress(**{k: inline.get(k) for k in _ADDRESS_FIELDS})
