from __future__ import annotations

import logging

from openpyxl import Workbook, load_workbook

from tienda.domain.errors import AppError, ValidationError

log = logging.getLogger(__name__)

IMPORT_HEADERS = ("barcode", "name", "category", "purchase_price", "sale_price", "stock", "min_stock", "unit")
REQUIRED_HEADERS = ("name", "sale_price")


class ExcelService:
    def __init__(self, inventory_service):
        self.inventory = inventory_service

    def import_products_excel(self, path: str) -> tuple[int, int]:
        """
        Catalog import. Rows whose barcode matches an existing product update it,
        everything else is inserted. Stock is absolute, not a delta.
        Headers:
          barcode | name | category | purchase_price | sale_price | stock | min_stock | unit
        Returns (imported, skipped).
        """
        wb = load_workbook(path, read_only=True, data_only=True)
        ws = wb.active

        headers = {}
        for col, v in enumerate(next(ws.iter_rows(min_row=1, max_row=1, values_only=True), ()), start=0):
            if isinstance(v, str):
                headers[v.strip().lower()] = col

        for r in REQUIRED_HEADERS:
            if r not in headers:
                wb.close()
                raise ValidationError(f"Missing column header: {r}")

        ok = 0
        skipped = 0
        for row_no, row in enumerate(ws.iter_rows(min_row=2, values_only=True), start=2):
            def cell(name):
                idx = headers.get(name)
                return row[idx] if idx is not None and idx < len(row) else None

            if all(v is None for v in row):
                continue
            values = {
                key: cell(key)
                for key in IMPORT_HEADERS
                if key != "barcode" and key in headers and cell(key) is not None
            }
            barcode = cell("barcode")
            if isinstance(barcode, float) and barcode.is_integer():
                barcode = int(barcode)
            try:
                for key in ("stock", "min_stock"):
                    if isinstance(values.get(key), float):
                        if not values[key].is_integer():
                            raise ValidationError(f"{key} must be a whole number, got {values[key]}")
                        values[key] = int(values[key])
                _, created = self.inventory.upsert_by_barcode(
                    str(barcode) if barcode is not None else None, values
                )
                ok += 1
                log.debug("excel_import_row row=%s created=%s", row_no, created)
            except AppError as e:
                log.warning("Excel import skipped row %s: %s", row_no, e)
                skipped += 1

        wb.close()
        log.info("excel_import_done path=%s imported=%s skipped=%s", path, ok, skipped)
        return ok, skipped

    def write_import_template(self, path: str) -> None:
        wb = Workbook()
        ws = wb.active
        ws.title = "Productos"
        ws.append(list(IMPORT_HEADERS))
        ws.append(["7501000000001", "Coca-Cola 600ml", "Bebidas", 12.0, 18.0, 24, 6, "pieza"])
        wb.save(path)
