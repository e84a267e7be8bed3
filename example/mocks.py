"""assertkit mocks for the example services."""

from assertkit import Mock


class MockDatabase(Mock):
    def get_user(self, user_id: int) -> dict | None:
        return self.called(user_id).get(0)

    def save_user(self, user: dict) -> dict:
        return self.called(user).get(0)


class MockLogger(Mock):
    def info(self, message: str) -> None:
        self.called(message)

    def error(self, message: str) -> None:
        self.called(message)


class MockPaymentGateway(Mock):
    def charge(self, amount: float, card_token: str) -> str:
        return self.called(amount, card_token).str(0)
