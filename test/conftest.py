import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture
def repo(tmp_path: Path):
    from tienda.repositories.sqlite_repo import SqliteRepository

    r = SqliteRepository(tmp_path / "tienda_test.db")
    r.init_db()
    return r


def add_product(repo, name: str = "Producto", sale_price: float = 10.0, stock: int = 5, **extra):
    from tienda.services.inventory_service import InventoryService

    return InventoryService(repo).add_product(name=name, sale_price=sale_price, stock=stock, **extra)


def add_customer(repo, name: str = "Cliente", credit_limit: float = 0.0):
    from tienda.services.credit_service import CreditService

    return CreditService(repo).add_customer(name=name, credit_limit=credit_limit)
