"""Example services with dependencies, exercised by the example suites."""

from dataclasses import dataclass
from typing import Protocol


# Protocols for dependencies
class Database(Protocol):
    def get_user(self, user_id: int) -> dict | None: ...
    def save_user(self, user: dict) -> dict: ...


class Logger(Protocol):
    def info(self, message: str) -> None: ...
    def error(self, message: str) -> None: ...


class PaymentDeclined(Exception):
    """Payment was declined."""


class PaymentGateway(Protocol):
    def charge(self, amount: float, card_token: str) -> str: ...


# Domain models
@dataclass
class User:
    id: int
    name: str
    email: str
    active: bool = True


@dataclass
class Order:
    id: int
    status: str
    total: float
    receipt: str = ""


class UserService:
    """User service that requires database and logger."""

    def __init__(self, db: Database, logger: Logger):
        self._db = db
        self._logger = logger

    def get_by_id(self, user_id: int) -> User | None:
        self._logger.info(f"Fetching user {user_id}")
        data = self._db.get_user(user_id)
        if data is None:
            return None
        return User(**data)

    def create(self, name: str, email: str) -> User:
        self._logger.info(f"Creating user: {name}")
        data = self._db.save_user({"name": name, "email": email, "active": True})
        return User(**data)

    def deactivate(self, user_id: int) -> bool:
        """Deactivate a user. Returns True if user existed."""
        user = self.get_by_id(user_id)
        if user is None:
            self._logger.error(f"User {user_id} not found")
            return False
        self._db.save_user({"id": user.id, "name": user.name, "email": user.email, "active": False})
        self._logger.info(f"Deactivated user {user_id}")
        return True


class OrderService:
    """Order processing service that depends on a PaymentGateway."""

    def __init__(self, payment_gateway: PaymentGateway):
        self.payment_gateway = payment_gateway
        self._next_id = 1000

    def place_order(self, amount: float, card_token: str) -> Order:
        """Place an order, charging the card.

        A declined payment yields a "declined" order; any other gateway
        failure yields an "error" order.
        """
        try:
            receipt = self.payment_gateway.charge(amount, card_token)
        except PaymentDeclined:
            return Order(id=0, status="declined", total=amount)
        except Exception:
            return Order(id=0, status="error", total=amount)

        order_id = self._next_id
        self._next_id += 1
        return Order(id=order_id, status="placed", total=amount, receipt=receipt)
