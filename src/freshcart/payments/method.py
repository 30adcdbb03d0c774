"""Payment methods offered at checkout.

Orders only record the chosen method id; nothing is charged.
"""

from protean import handle
from protean.fields import Boolean, String
from protean.utils.globals import current_domain

from freshcart.domain import freshcart


@freshcart.aggregate
class PaymentMethod:
    name = String(required=True, max_length=100)
    is_enabled = Boolean(default=True)


@freshcart.repository(part_of=PaymentMethod)
class PaymentMethodRepository:
    def enabled(self) -> list[PaymentMethod]:
        methods = self._dao.query.order_by("name").limit(None).all().items
        return [method for method in methods if method.is_enabled]


@freshcart.command(part_of="PaymentMethod")
class AddPaymentMethod:
    name = String(required=True, max_length=100)
    is_enabled = Boolean(default=True)


@freshcart.command_handler(part_of=PaymentMethod)
class PaymentMethodHandler:
    @handle(AddPaymentMethod)
    def add_payment_method(self, command):
        method = PaymentMethod(
            name=command.name,
            is_enabled=command.is_enabled if command.is_enabled is not None else True,
        )
        current_domain.repository_for(PaymentMethod).add(method)
        return str(method.id)


def list_payment_methods() -> list[PaymentMethod]:
    return current_domain.repository_for(PaymentMethod).enabled()
