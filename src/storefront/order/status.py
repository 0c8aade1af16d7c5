"""Administrative order status changes: command and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import logger, storefront
from storefront.order.cancellation import restore_stock
from storefront.order.order import Order, OrderStatus


@storefront.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, choices=OrderStatus)


@storefront.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        previous_status = order.status

        order.update_status(command.status)
        repo.add(order)

        if order.status == OrderStatus.CANCELLED.value and previous_status != OrderStatus.CANCELLED.value:
            restore_stock(order)

        logger.info(
            "order_status_updated",
            order_id=str(order.id),
            previous_status=previous_status,
            new_status=order.status,
        )
