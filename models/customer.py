from pydantic import BaseModel, ConfigDict
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from models.base import Base


class Customer(Base):
    __tablename__ = 'customers'

    id = Column(Integer, primary_key=True)
    slug = Column(String, nullable=False, unique=True)  # Customer email is used as slug
    name = Column(String, nullable=True)

    addresses = relationship(
        "Address",
        back_populates="customer",
        order_by="Address.position",
        cascade="all, delete-orphan",
        lazy="selectin"
    )


class Address(Base):
    __tablename__ = 'addresses'

    id = Column(Integer, primary_key=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False)
    key = Column(String, nullable=False)        # Caller-facing address key (e.g. "home", "0")
    position = Column(Integer, nullable=False, default=0)
    # Composite "country|region" value as stored by the address form
    country = Column(String, nullable=False)
    is_default = Column(Boolean, nullable=False, default=False)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    street = Column(String, nullable=True)
    city = Column(String, nullable=True)
    postal_code = Column(String, nullable=True)

    customer = relationship("Customer", back_populates="addresses")

    __table_args__ = (
        UniqueConstraint('customer_id', 'key', name='uq_address_customer_key'),
    )


class AddressDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    key: str
    country: str
    region: str | None = None
    is_default: bool = False
    first_name: str | None = None
    last_name: str | None = None
    street: str | None = None
    city: str | None = None
    postal_code: str | None = None


class CustomerDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int | None = None
    slug: str
    name: str | None = None
    addresses: list[AddressDTO] = []


class DefaultAddressDTO(BaseModel):
    """Session-cached default address: the chosen key plus the split address."""
    key: str
    address: AddressDTO
