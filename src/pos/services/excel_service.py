from __future__ import annotations

import logging
from datetime import date, datetime

from openpyxl import load_workbook

from pos.domain.errors import AppError, InvalidArgumentError
from pos.domain.models import Product, to_quantity

log = logging.getLogger(__name__)

REQUIRED_HEADERS = ["id", "name", "category", "purchase_cost", "markup_percent", "expiration_date", "quantity"]


class ExcelService:
    def __init__(self, inventory_service):
        self.inventory = inventory_service

    def import_catalog_excel(self, path: str) -> tuple[int, int]:
        """
        Loads products into the catalog. Headers:
          id | name | category | purchase_cost | markup_percent | expiration_date | quantity

        Rows that are incomplete, malformed or reuse an existing id are skipped.
        """
        wb = load_workbook(path)
        ws = wb.active

        headers = {}
        for col in range(1, ws.max_column + 1):
            v = ws.cell(row=1, column=col).value
            if isinstance(v, str):
                headers[v.strip().lower()] = col

        for r in REQUIRED_HEADERS:
            if r not in headers:
                raise InvalidArgumentError(f"Missing column header: {r}")

        added = 0
        skipped = 0

        for row in range(2, ws.max_row + 1):
            values = {h: ws.cell(row=row, column=headers[h]).value for h in REQUIRED_HEADERS}
            if any(v is None or v == "" for v in values.values()):
                skipped += 1
                continue
            try:
                product = Product(
                    id=str(values["id"]).strip(),
                    name=str(values["name"]).strip(),
                    category=str(values["category"]).strip().upper(),
                    purchase_cost=values["purchase_cost"],
                    markup_percent=values["markup_percent"],
                    expiration_date=self._as_date(values["expiration_date"]),
                    quantity_in_stock=to_quantity(values["quantity"]),
                )
                self.inventory.add_product(product)
            except (AppError, ValueError, TypeError) as e:
                log.warning("Catalog import skipped row %s: %s", row, e)
                skipped += 1
                continue
            added += 1

        return added, skipped

    @staticmethod
    def _as_date(value) -> date:
        # openpyxl hands back datetimes for date-formatted cells
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        return date.fromisoformat(str(value).strip())
