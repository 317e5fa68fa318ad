"""Repository for the Order aggregate."""

from fulfillment.domain import fulfillment
from fulfillment.order.order import Order


@fulfillment.repository(part_of=Order)
class OrderRepository:
    def find_by_tracking(self, tracking: str) -> Order | None:
        return self._dao.query.filter(tracking=tracking).all().first

    def find_by_external_id(self, order_ginee_id: str) -> Order | None:
        return self._dao.query.filter(order_ginee_id=order_ginee_id).all().first
