from sqlalchemy import Column, Integer, String, Boolean, ForeignKey
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    role = Column(String, nullable=False, default="user")  # user, admin

    addresses = relationship(
        "AddressModel",
        back_populates="user",
        cascade="all, delete-orphan",
    )


class AddressModel(Base):
    """Wpis ksiazki adresowej. Core tylko czyta."""

    __tablename__ = "addresses"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String, nullable=False)
    phone = Column(String, nullable=False)
    address = Column(String, nullable=False)
    city = Column(String, nullable=False)
    region = Column(String, nullable=False)
    district = Column(String, nullable=False)
    landmark = Column(String, nullable=True)
    ship_to = Column(String, nullable=False, default="home")  # home, office
    default_shipping = Column(Boolean, nullable=False, default=False)

    user = relationship("UserModel", back_populates="addresses")
