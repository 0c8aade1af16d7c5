"""Order payment: command and handler."""

import json

from protean import handle
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from storefront.domain import logger, storefront
from storefront.order.order import Order


@storefront.command(part_of="Order")
class MarkOrderPaid:
    order_id = Identifier(required=True)
    requester_id = Identifier(required=True)
    payment_result = Text(required=True)  # JSON: {id, status, update_time?, email_address?}


@storefront.command_handler(part_of=Order)
class MarkOrderPaidHandler:
    @handle(MarkOrderPaid)
    def mark_order_paid(self, command):
        payment_result = (
            json.loads(command.payment_result)
            if isinstance(command.payment_result, str)
            else command.payment_result
        )

        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.mark_paid(requester_id=command.requester_id, payment_result=payment_result)
        repo.add(order)

        logger.info("order_paid", order_id=str(order.id), payment_id=payment_result["id"])
