"""Example suites.

    assertkit run example.suites:UserServiceSuite
    assertkit run example.suites:OrderServiceSuite --parallel
"""

import asyncio

from assertkit import Anything, Suite, any_of_type
from example.mocks import MockDatabase, MockLogger, MockPaymentGateway
from example.services import OrderService, PaymentDeclined, User, UserService

KOHL = {"id": 1, "name": "Kohl", "email": "kohl@example.com", "active": True}


class UserServiceSuite(Suite):
    """UserService against a mocked database and logger."""

    def setup_test(self):
        self.db = MockDatabase()
        self.logger = MockLogger()
        self.logger.on("info", any_of_type(str))
        self.service = UserService(self.db, self.logger)

    def teardown_test(self):
        self.db.assert_expectations(self.t())

    def test_get_by_id(self):
        self.db.on("get_user", 1).returns(dict(KOHL)).once()

        user = self.service.get_by_id(1)

        self.assert_.equal(User(**KOHL), user)

    def test_get_missing_user(self):
        self.db.on("get_user", 99).returns(None).once()

        self.assert_.is_none(self.service.get_by_id(99))

    def test_create(self):
        saved = {"id": 3, "name": "Ann", "email": "ann@example.com", "active": True}
        self.db.on("save_user", {"name": "Ann", "email": "ann@example.com", "active": True}).returns(saved)

        user = self.service.create("Ann", "ann@example.com")

        self.require.is_not_none(user)
        self.assert_.equal(3, user.id)
        self.assert_.true(user.active)

    def test_deactivate(self):
        get = self.db.on("get_user", 1).returns(dict(KOHL)).once()
        self.db.on("save_user", {**KOHL, "active": False}).returns({**KOHL, "active": False}).once().not_before(get)

        self.assert_.true(self.service.deactivate(1))

    def test_deactivate_missing_user(self):
        self.db.on("get_user", 7).returns(None)
        self.logger.on("error", "User 7 not found").once()

        self.assert_.false(self.service.deactivate(7))
        self.logger.assert_not_called(self.t(), "error", "User 8 not found")
        self.db.assert_number_of_calls(self.t(), "save_user", 0)


class OrderServiceSuite(Suite):
    """OrderService against a mocked payment gateway.

    Safe to run with run_parallel: every test gets its own copy of the suite.
    """

    def setup_test(self):
        self.gateway = MockPaymentGateway()
        self.service = OrderService(self.gateway)

    def teardown_test(self):
        self.gateway.assert_expectations(self.t())

    def test_place_order(self):
        self.gateway.on("charge", 25.0, "tok_visa").returns("rcpt_1").once()

        order = self.service.place_order(25.0, "tok_visa")

        self.assert_.equal("placed", order.status)
        self.assert_.equal("rcpt_1", order.receipt)
        self.assert_.greater_or_equal(order.id, 1000)

    def test_declined(self):
        self.gateway.on("charge", Anything, "tok_declined").raises(PaymentDeclined("insufficient funds"))

        order = self.service.place_order(10.0, "tok_declined")

        self.assert_.equal("declined", order.status)
        self.assert_.zero(order.id)

    def test_gateway_error(self):
        self.gateway.on("charge", Anything, Anything).raises(ConnectionError("gateway down"))

        self.assert_.equal("error", self.service.place_order(5.0, "tok_visa").status)

    async def test_concurrent_orders(self):
        self.gateway.on("charge", any_of_type(float), "tok_visa").returns("rcpt").times(3)

        orders = await asyncio.gather(
            *(asyncio.to_thread(self.service.place_order, amount, "tok_visa") for amount in (1.0, 2.0, 3.0))
        )

        self.assert_.elements_match([1.0, 2.0, 3.0], [order.total for order in orders])
        self.gateway.assert_number_of_calls(self.t(), "charge", 3)
