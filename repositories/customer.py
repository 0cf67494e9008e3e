from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session, selectinload

from db import session_execute
from models.customer import Customer, CustomerDTO


class CustomerRepository:
    @staticmethod
    async def get_by_slug_or_key(customer_key: str, session: AsyncSession | Session) -> CustomerDTO | None:
        """
        Find a customer by slug (the customer's email) or by numeric id.

        Args:
            customer_key: Customer slug/email, or the id as a string
            session: Database session

        Returns:
            CustomerDTO with addresses in their stored order, or None
        """
        conditions = [Customer.slug == customer_key]
        if customer_key.isdigit():
            conditions.append(Customer.id == int(customer_key))

        stmt = (
            select(Customer)
            .where(or_(*conditions))
            .options(selectinload(Customer.addresses))
            .limit(1)
        )
        customer = await session_execute(stmt, session)
        customer = customer.scalar()
        if customer is None:
            return None
        # Address.country is the raw composite value; splitting happens in the shipping resolver
        return CustomerDTO.model_validate(customer, from_attributes=True)
