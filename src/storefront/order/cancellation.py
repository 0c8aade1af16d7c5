"""Order cancellation: command and handler.

Cancelling returns every ordered unit to stock in the same unit of work that
flips the status, the inverse of the decrement done at checkout.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import logger, storefront
from storefront.order.order import Order


@storefront.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    requester_id = Identifier(required=True)


def restore_stock(order):
    """Give each line's quantity back to its product. Deleted products are skipped."""
    product_repo = current_domain.repository_for(Product)
    for item in order.items:
        try:
            product = product_repo.get(item.product_id)
        except ObjectNotFoundError:
            logger.warning(
                "stock_restore_skipped",
                order_id=str(order.id),
                product_id=str(item.product_id),
                quantity=item.quantity,
            )
            continue

        product.restore_stock(item.quantity)
        product_repo.add(product)

    logger.info("stock_restored", order_id=str(order.id), lines=len(order.items))


@storefront.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.cancel(requester_id=command.requester_id)
        repo.add(order)

        restore_stock(order)
        logger.info("order_cancelled", order_id=str(order.id), customer_id=str(order.customer_id))
