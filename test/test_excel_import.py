from pathlib import Path

import pytest
from openpyxl import Workbook, load_workbook

from tienda.domain.errors import ValidationError
from tienda.services.excel_service import IMPORT_HEADERS, ExcelService
from tienda.services.inventory_service import InventoryService


def _write(path: Path, rows, headers=IMPORT_HEADERS):
    wb = Workbook()
    ws = wb.active
    ws.append(list(headers))
    for r in rows:
        ws.append(list(r))
    wb.save(path)
    return path


def test_import_inserts_updates_and_skips(repo, tmp_path: Path):
    inv = InventoryService(repo)
    existing = inv.add_product(name="Coca-Cola", sale_price=15.0, barcode="7501055300075", stock=2)

    path = _write(tmp_path / "productos.xlsx", [
        # numeric barcode cells come back as numbers; update keeps the same product
        (7501055300075, "Coca-Cola 600ml", "Bebidas", 12, 18, 24, 6, "pieza"),
        ("", "Azúcar", "Abarrotes", 20, 28.5, 10, 3, "kg"),
        ("111", "Sin precio", "Otros", 1, None, 1, 1, "pieza"),
        ("222", "Unidad rara", "Otros", 1, 2, 1, 1, "docena"),
        (None, None, None, None, None, None, None, None),
    ])

    ok, skipped = ExcelService(inv).import_products_excel(str(path))

    assert (ok, skipped) == (2, 2)
    updated = inv.get_product(existing.id)
    assert (updated.name, updated.sale_price, updated.stock, updated.category) == ("Coca-Cola 600ml", 18.0, 24, "Bebidas")
    sugar = next(p for p in inv.list_products() if p.name == "Azúcar")
    assert (sugar.unit, sugar.barcode, sugar.min_stock) == ("kg", None, 3)


def test_import_skips_fractional_stock(repo, tmp_path: Path):
    inv = InventoryService(repo)
    path = _write(tmp_path / "granel.xlsx", [
        ("", "Frijol", "Abarrotes", 20, 32, 2.5, 1, "kg"),
        ("", "Arroz", "Abarrotes", 18, 26, 10.0, 2.0, "kg"),
    ])

    assert ExcelService(inv).import_products_excel(str(path)) == (1, 1)
    assert [(p.name, p.stock, p.min_stock) for p in inv.list_products()] == [("Arroz", 10, 2)]


def test_import_requires_name_and_price_headers(repo, tmp_path: Path):
    path = _write(tmp_path / "malo.xlsx", [("1", "X")], headers=("barcode", "name"))
    with pytest.raises(ValidationError, match="sale_price"):
        ExcelService(InventoryService(repo)).import_products_excel(str(path))


def test_template_round_trips_through_import(repo, tmp_path: Path):
    excel = ExcelService(InventoryService(repo))
    path = tmp_path / "plantilla.xlsx"
    excel.write_import_template(str(path))

    headers = [c.value for c in load_workbook(path).active[1]]
    assert tuple(headers) == IMPORT_HEADERS
    assert excel.import_products_excel(str(path)) == (1, 0)
