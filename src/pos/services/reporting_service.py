from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.table import Table, TableStyleInfo


@dataclass(frozen=True)
class FinancialSummary:
    store_name: str
    salary_expenses: Decimal
    supply_expenses: Decimal
    revenue: Decimal
    receipts_count: int

    @property
    def total_expenses(self) -> Decimal:
        return self.salary_expenses + self.supply_expenses

    @property
    def profit(self) -> Decimal:
        return self.revenue - self.total_expenses


class ReportingService:
    def __init__(self, store_name: str, cashiers, inventory, receipts):
        self.store_name = store_name
        self.cashiers = cashiers
        self.inventory = inventory
        self.receipts = receipts

    def financial_summary(self) -> FinancialSummary:
        return FinancialSummary(
            store_name=self.store_name,
            salary_expenses=self.cashiers.total_salary_expenses(),
            supply_expenses=self.inventory.total_purchase_value(),
            revenue=self.receipts.total_revenue(),
            receipts_count=self.receipts.receipt_count(),
        )

    def export_financial_report_excel(self, path: str) -> None:
        wb = Workbook()

        def money(cell):
            cell.number_format = "#,##0.00"

        def bold_row(ws, r):
            for c in ws[r]:
                c.font = Font(bold=True)

        def set_widths(ws, widths: dict[str, int]):
            for col, w in widths.items():
                ws.column_dimensions[col].width = w

        def add_table(ws, name: str, start_row: int, start_col: int, end_row: int, end_col: int):
            ref = f"{get_column_letter(start_col)}{start_row}:{get_column_letter(end_col)}{end_row}"
            tab = Table(displayName=name, ref=ref)
            tab.tableStyleInfo = TableStyleInfo(
                name="TableStyleMedium9",
                showRowStripes=True,
                showColumnStripes=False,
            )
            ws.add_table(tab)

        summary = self.financial_summary()

        # -------- 1) Summary --------
        ws = wb.active
        ws.title = "Summary"
        ws["A1"] = f"Financial report - {summary.store_name}"
        ws["A1"].font = Font(bold=True, size=14)

        rows = [
            ("Salary expenses EUR", summary.salary_expenses, "money"),
            ("Supply expenses EUR", summary.supply_expenses, "money"),
            ("Total expenses EUR", summary.total_expenses, "money"),
            ("Revenue from sales EUR", summary.revenue, "money"),
            ("Profit EUR", summary.profit, "money"),
            ("Issued receipts", summary.receipts_count, "int"),
        ]

        start_row = 3
        for i, (label, val, kind) in enumerate(rows):
            r = start_row + i
            ws[f"A{r}"] = label
            if kind == "money":
                ws[f"B{r}"] = float(val)
                money(ws[f"B{r}"])
            else:
                ws[f"B{r}"] = int(val)

        set_widths(ws, {"A": 28, "B": 18})

        # -------- 2) Receipts --------
        ws2 = wb.create_sheet("Receipts")
        ws2.append([
            "Receipt #", "Issued at", "Cashier ID", "Cashier",
            "Product ID", "Product Name", "Qty", "Unit Price EUR", "Line Total EUR",
        ])
        bold_row(ws2, 1)

        out_row = 2
        for receipt in self.receipts.list_receipts():
            for ln in receipt.lines:
                ws2.append([
                    int(receipt.receipt_number), receipt.issued_at.isoformat(sep=" "),
                    receipt.cashier.id, receipt.cashier.name,
                    ln.product.id, ln.product.name,
                    int(ln.quantity), float(ln.unit_price), float(ln.line_total),
                ])
                money(ws2[f"H{out_row}"])
                money(ws2[f"I{out_row}"])
                out_row += 1

        ws2.freeze_panes = "A2"
        set_widths(ws2, {
            "A": 10, "B": 22, "C": 12, "D": 24,
            "E": 12, "F": 30, "G": 6, "H": 16, "I": 16,
        })
        if ws2.max_row >= 2:
            add_table(ws2, "ReceiptLines", 1, 1, ws2.max_row, 9)

        wb.save(path)
