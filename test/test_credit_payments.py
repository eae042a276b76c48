import pytest

from conftest import add_customer, add_product
from tienda.domain.errors import InsufficientDebtError, NotFoundError, ValidationError
from tienda.domain.models import CartItem
from tienda.services.credit_service import CreditService
from tienda.services.sales_service import SalesService


def _customer_with_debt(repo, debt_units: int = 4):
    p = add_product(repo, "Huevo", 25.0, stock=20)
    c = add_customer(repo, "Toño", credit_limit=500.0)
    SalesService(repo, duplicate_window_seconds=0).checkout([CartItem(p, debt_units)], "fiado", customer_id=c.id)
    return c


def test_payment_decrements_debt_exactly(repo):
    c = _customer_with_debt(repo)
    credit = CreditService(repo)

    payment = credit.record_payment(c.id, 30.0, "efectivo", notes="abono semanal")

    assert payment.amount == 30.0
    assert payment.customer_name == "Toño"
    assert repo.get_customer(c.id).current_debt == pytest.approx(70.0)
    assert [p.id for p in credit.payments_for_customer(c.id)] == [payment.id]


def test_paying_full_debt_leaves_zero(repo):
    c = _customer_with_debt(repo)
    credit = CreditService(repo)
    credit.record_payment(c.id, 100.0)
    assert repo.get_customer(c.id).current_debt == 0.0


@pytest.mark.parametrize("amount", [0, -5, "abc"])
def test_rejects_non_positive_or_invalid_amounts(repo, amount):
    c = _customer_with_debt(repo)
    with pytest.raises(ValidationError):
        CreditService(repo).record_payment(c.id, amount)
    assert repo.get_customer(c.id).current_debt == 100.0


def test_rejects_payment_above_debt(repo):
    c = _customer_with_debt(repo)
    with pytest.raises(InsufficientDebtError):
        CreditService(repo).record_payment(c.id, 100.01)
    assert repo.list_credit_payments() == []


def test_repository_rechecks_debt_inside_transaction(repo):
    c = _customer_with_debt(repo, debt_units=1)
    with pytest.raises(InsufficientDebtError):
        repo.record_credit_payment(c.id, 50.0, "efectivo", None, None, "2024-05-01 10:00:00")
    assert repo.get_customer(c.id).current_debt == 25.0
    assert repo.list_credit_payments() == []


def test_fiado_is_not_a_payment_method(repo):
    c = _customer_with_debt(repo)
    with pytest.raises(ValidationError, match="payment method"):
        CreditService(repo).record_payment(c.id, 10.0, "fiado")


def test_payment_for_unknown_customer(repo):
    with pytest.raises(NotFoundError):
        CreditService(repo).record_payment(12345, 10.0)


def test_customer_validation_and_search(repo):
    credit = CreditService(repo)
    with pytest.raises(ValidationError, match="name"):
        credit.add_customer(name="   ")
    with pytest.raises(ValidationError, match="Credit limit"):
        credit.add_customer(name="X", credit_limit=-1)

    credit.add_customer(name="María López", phone="555-1234")
    credit.add_customer(name="Pedro", phone="555-9876")
    assert [c.name for c in credit.search_customers("maría")] == ["María López"]
    assert [c.name for c in credit.search_customers("9876")] == ["Pedro"]


def test_ledger_summary_and_deactivation(repo):
    c = _customer_with_debt(repo)
    credit = CreditService(repo)
    other = credit.add_customer(name="Sin deuda")

    summary = credit.ledger_summary()
    assert summary.total_debt == pytest.approx(100.0)
    assert summary.customers_with_debt == 1
    assert summary.over_limit == ()

    credit.deactivate_customer(other.id)
    assert [x.id for x in credit.list_customers()] == [c.id]


def test_payment_logged_on_credit_channel(repo, caplog):
    c = _customer_with_debt(repo)
    with caplog.at_level("INFO", logger="tienda.credit"):
        CreditService(repo).record_payment(c.id, 10.0)
    assert any("payment_recorded" in r.getMessage() for r in caplog.records)


def test_rejects_non_finite_amounts(repo):
    c = _customer_with_debt(repo)
    credit = CreditService(repo)
    for amount in ("nan", float("inf")):
        with pytest.raises(ValidationError, match="finite"):
            credit.record_payment(c.id, amount)
    assert repo.list_credit_payments() == []
    assert repo.get_customer(c.id).current_debt == 100.0


def test_update_customer(repo):
    credit = CreditService(repo)
    c = credit.add_customer(name="Lupita", phone="555-0000")

    updated = credit.update_customer(c.id, phone=" 555-1111 ", credit_limit="250")
    assert (updated.name, updated.phone, updated.credit_limit) == ("Lupita", "555-1111", 250.0)

    with pytest.raises(ValidationError, match="Credit limit"):
        credit.update_customer(c.id, credit_limit=-1)
    with pytest.raises(ValidationError, match="name"):
        credit.update_customer(c.id, name="  ")
    with pytest.raises(ValidationError, match="Unknown customer field"):
        credit.update_customer(c.id, current_debt=0)
    with pytest.raises(NotFoundError):
        credit.update_customer(98765, phone="1")

    assert credit.get_customer(c.id).credit_limit == 250.0
