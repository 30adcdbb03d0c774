from freshcart.payments.method import AddPaymentMethod, PaymentMethod, list_payment_methods
from protean import current_domain


def _add(name, is_enabled=True):
    return current_domain.process(AddPaymentMethod(name=name, is_enabled=is_enabled), asynchronous=False)


class TestPaymentMethods:
    def test_add(self):
        method_id = _add("Cash on delivery")
        method = current_domain.repository_for(PaymentMethod).get(method_id)
        assert method.name == "Cash on delivery"
        assert method.is_enabled

    def test_lists_enabled_by_name(self):
        _add("Transfer")
        _add("Cash on delivery")
        _add("Cheque", is_enabled=False)
        assert [method.name for method in list_payment_methods()] == ["Cash on delivery", "Transfer"]

    def test_lists_every_enabled_method(self):
        for n in range(105):
            _add(f"Voucher {n:03d}")
        assert len(list_payment_methods()) == 105
