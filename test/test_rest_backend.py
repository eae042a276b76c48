import json as jsonlib
from urllib.parse import urlparse

import pytest
import requests

from tienda.domain.errors import CheckoutError, InsufficientStockError, StoreError
from tienda.domain.models import CartItem
from tienda.repositories.rest_client import RestClient
from tienda.repositories.rest_repo import RestRepository, Saga
from tienda.services.credit_service import CreditService
from tienda.services.sales_service import SalesService


class FakeResponse:
    def __init__(self, status_code: int, payload=None):
        self.status_code = status_code
        self._payload = payload
        self.text = "" if payload is None else jsonlib.dumps(payload)
        self.content = self.text.encode()

    def json(self):
        return jsonlib.loads(self.text)


def _literal(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class FakeStore:
    """Minimal in-memory PostgREST: eq filters, inserts, patches, deletes and two embeds."""

    def __init__(self):
        self.headers = {}
        self.tables: dict[str, list[dict]] = {}
        self.next_id = 1
        self.fail_on: set[tuple[str, str]] = set()
        self.calls: list[tuple[str, str]] = []

    def _match(self, row: dict, params: dict) -> bool:
        for col, cond in params.items():
            if col in ("select", "order", "limit", "and", "or"):
                continue
            op, _, operand = cond.partition(".")
            if op == "eq" and _literal(row.get(col)) != operand:
                return False
        return True

    def _embed(self, table: str, row: dict, select: str) -> dict:
        row = dict(row)
        if table == "sales" and "sale_items(" in select:
            row["sale_items"] = [i for i in self.tables.get("sale_items", []) if i["sale_id"] == row["id"]]
        if table == "credit_payments" and "customers(" in select:
            cust = next(c for c in self.tables["customers"] if c["id"] == row["customer_id"])
            row["customers"] = {"name": cust["name"]}
        return row

    def request(self, method, url, timeout=None, params=None, json=None, headers=None):
        table = urlparse(url).path.rsplit("/", 1)[-1]
        self.calls.append((method, table))
        if (method, table) in self.fail_on:
            return FakeResponse(500, {"message": f"boom on {method} {table}"})

        rows = self.tables.setdefault(table, [])
        params = params or {}
        if method == "GET":
            found = [self._embed(table, r, params.get("select", "*")) for r in rows if self._match(r, params)]
            if "limit" in params:
                found = found[: int(params["limit"])]
            return FakeResponse(200, found)
        if method == "POST":
            created = []
            for values in (json if isinstance(json, list) else [json]):
                row = {"id": self.next_id, **values}
                self.next_id += 1
                rows.append(row)
                created.append(dict(row))
            return FakeResponse(201, created)
        if method == "PATCH":
            changed = []
            for r in rows:
                if self._match(r, params):
                    r.update(json)
                    changed.append(dict(r))
            return FakeResponse(200, changed)
        if method == "DELETE":
            gone = [r for r in rows if self._match(r, params)]
            self.tables[table] = [r for r in rows if r not in gone]
            return FakeResponse(200, gone)
        raise AssertionError(method)

    def seed(self, table: str, **values) -> dict:
        row = {"id": self.next_id, **values}
        self.next_id += 1
        self.tables.setdefault(table, []).append(row)
        return row


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def rest_repo(store):
    return RestRepository(RestClient("https://example.test/", "anon-key", timeout=2, session=store))


def _seed_basics(store):
    p = store.seed("products", name="Refresco", sale_price=10.0, purchase_price=6.0, stock=5, min_stock=2,
                   is_active=True, is_favorite=False, unit="pieza")
    c = store.seed("customers", name="Doña Mary", credit_limit=0.0, current_debt=0.0, is_active=True)
    return p, c


def test_client_sends_auth_headers(store, rest_repo):
    assert store.headers["apikey"] == "anon-key"
    assert store.headers["Authorization"] == "Bearer anon-key"
    rest_repo.list_products()
    assert store.calls == [("GET", "products")]


def test_fiado_checkout_over_rest(store, rest_repo):
    p, c = _seed_basics(store)
    product = rest_repo.get_product_by_id(p["id"])

    sale = SalesService(rest_repo, duplicate_window_seconds=0).checkout(
        [CartItem(product, 2)], "fiado", customer_id=c["id"]
    )

    assert sale.total == 20.0
    assert sale.payment_status == "pendiente"
    assert [it.quantity for it in sale.items] == [2]
    assert rest_repo.get_product_by_id(p["id"]).stock == 3
    assert rest_repo.get_customer(c["id"]).current_debt == 20.0


def test_failed_debt_update_compensates_every_step(store, rest_repo):
    p, c = _seed_basics(store)
    product = rest_repo.get_product_by_id(p["id"])
    store.fail_on.add(("PATCH", "customers"))

    with pytest.raises(CheckoutError, match="Sale could not be recorded"):
        SalesService(rest_repo, duplicate_window_seconds=0).checkout(
            [CartItem(product, 2)], "fiado", customer_id=c["id"]
        )

    assert store.tables["sales"] == []
    assert store.tables["sale_items"] == []
    assert rest_repo.get_product_by_id(p["id"]).stock == 5
    assert ("DELETE", "sales") in store.calls


def test_failed_item_insert_leaves_stock_untouched(store, rest_repo):
    p, _ = _seed_basics(store)
    product = rest_repo.get_product_by_id(p["id"])
    store.fail_on.add(("POST", "sale_items"))

    with pytest.raises(CheckoutError):
        SalesService(rest_repo, duplicate_window_seconds=0).checkout([CartItem(product, 1)], "efectivo")

    assert store.tables["sales"] == []
    assert rest_repo.get_product_by_id(p["id"]).stock == 5
    assert ("PATCH", "products") not in store.calls


def test_failed_compensation_is_reported(store, rest_repo):
    p, c = _seed_basics(store)
    product = rest_repo.get_product_by_id(p["id"])
    store.fail_on.update({("PATCH", "customers"), ("DELETE", "sales")})

    with pytest.raises(CheckoutError, match="manual review needed.*insert_sale"):
        SalesService(rest_repo, duplicate_window_seconds=0).checkout(
            [CartItem(product, 1)], "fiado", customer_id=c["id"]
        )


def test_rest_stock_recheck(store, rest_repo):
    p, _ = _seed_basics(store)
    header = {"sale_number": "V-1", "customer_id": None, "total": 60.0,
              "payment_method": "efectivo", "payment_status": "pagado", "notes": None}
    items = [{"product_id": p["id"], "product_name": "Refresco", "quantity": 6, "unit_price": 10.0, "subtotal": 60.0}]
    with pytest.raises(InsufficientStockError):
        rest_repo.create_sale_with_items(header, items)
    assert ("POST", "sales") not in store.calls


def test_payment_over_rest_and_compensation(store, rest_repo):
    _, c = _seed_basics(store)
    store.tables["customers"][0]["current_debt"] = 80.0
    credit = CreditService(rest_repo)

    payment = credit.record_payment(c["id"], 30.0)
    assert payment.customer_name == "Doña Mary"
    assert rest_repo.get_customer(c["id"]).current_debt == 50.0
    assert [p.customer_name for p in credit.list_payments()] == ["Doña Mary"]

    store.fail_on.add(("PATCH", "customers"))
    with pytest.raises(CheckoutError):
        credit.record_payment(c["id"], 10.0)
    assert len(store.tables["credit_payments"]) == 1
    assert rest_repo.get_customer(c["id"]).current_debt == 50.0


def test_http_errors_become_store_errors():
    class Down:
        headers: dict = {}

        def request(self, *args, **kwargs):
            raise requests.ConnectionError("no route")

    client = RestClient("https://example.test", "k", session=Down())
    with pytest.raises(StoreError, match="unreachable"):
        client.select("products")

    store = FakeStore()
    store.fail_on.add(("GET", "products"))
    client = RestClient("https://example.test", "k", session=store)
    with pytest.raises(StoreError) as info:
        client.select("products")
    assert info.value.status_code == 500


def test_filter_encoding():
    client = RestClient("https://example.test", "k", session=FakeStore())
    params = client._params(
        {"id": 3, "is_active": True, "created_at": ("gte", "2024-05-01"), "sale_id": None,
         "and": "(total.gt.1,total.lt.5)"},
        order=["created_at.desc"],
        limit=10,
        columns="*",
    )
    assert params == {
        "select": "*",
        "id": "eq.3",
        "is_active": "eq.true",
        "created_at": "gte.2024-05-01",
        "sale_id": "is.null",
        "and": "(total.gt.1,total.lt.5)",
        "order": "created_at.desc",
        "limit": "10",
    }
    with pytest.raises(ValueError):
        client.delete("products", {})


def test_saga_undoes_in_reverse_order():
    done = []
    saga = Saga("t")
    saga.step("a", lambda: 1, undo=lambda r: done.append(("a", r)))
    saga.step("b", lambda: 2, undo=lambda r: done.append(("b", r)))
    saga.step("c", lambda: 3)
    assert saga.compensate() == []
    assert done == [("b", 2), ("a", 1)]
