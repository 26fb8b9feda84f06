import csv
import io
from typing import Any, Dict, List

from fpdf import FPDF

from spendwise.utils.dates import parse_timestamp

CSV_HEADERS = ["Date", "Title", "Type", "Category", "Amount", "Notes"]
FORMULA_TRIGGERS = ("=", "+", "-", "@")


def sanitize_csv_value(value: Any) -> str:
    """
    Neutralize text a spreadsheet would evaluate as a formula by prefixing a tab.
    """
    text = str(value or "").strip()
    if text.startswith(FORMULA_TRIGGERS):
        return "\t" + text
    return text


def _latin1(text: Any) -> str:
    # Core PDF fonts only cover latin-1.
    return str(text).encode("latin-1", "replace").decode("latin-1")


def _line(pdf: FPDF, text: str, height: int = 8) -> None:
    pdf.cell(0, height, _latin1(text), new_x="LMARGIN", new_y="NEXT")


def generate_monthly_pdf(user_name: str, month: str, summary: Dict[str, Any], budget: Dict[str, Any]) -> bytes:
    pdf = FPDF()
    pdf.add_page()
    pdf.set_font("Helvetica", "B", 16)
    _line(pdf, f"Monthly Report - {month}", height=10)

    pdf.set_font("Helvetica", "", 12)
    _line(pdf, f"Prepared for: {user_name}")
    _line(pdf, f"Total Spent: ${summary['total_spent']:.2f}")
    _line(pdf, f"Total Income: ${summary['total_income']:.2f}")
    _line(pdf, f"Net: ${summary['net']:.2f}")
    _line(pdf, f"Transactions: {summary['transaction_count']}")
    pdf.ln(5)

    pdf.set_font("Helvetica", "B", 12)
    _line(pdf, "Spending by Category:")
    pdf.set_font("Helvetica", "", 12)
    if summary["insights"]:
        for insight in summary["insights"]:
            _line(
                pdf,
                f"- {insight['category']}: ${insight['total']:.2f} "
                f"({insight['transaction_count']} transactions, {insight['share']:.1f}%)",
            )
    else:
        _line(pdf, "No spending recorded")

    pdf.ln(5)
    pdf.set_font("Helvetica", "B", 12)
    _line(pdf, f"Budget Health: {budget['healthPercentage']:.1f}% ({budget['healthStatus']})")
    pdf.set_font("Helvetica", "", 12)
    for item in budget["categories"]:
        flag = " OVER" if item["isOverBudget"] else ""
        _line(pdf, f"- {item['category']}: ${item['spent']:.2f} of ${item['limit']:.2f}{flag}")

    return bytes(pdf.output())


def generate_csv(expenses: List[Dict[str, Any]]) -> str:
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for e in expenses:
        writer.writerow(
            [
                parse_timestamp(e["date"]).strftime("%Y-%m-%d"),
                sanitize_csv_value(e.get("title", "")),
                e.get("type") or "expense",
                e.get("category") or "Other",
                e.get("amount", 0),
                sanitize_csv_value(e.get("notes")),
            ]
        )
    return output.getvalue()
