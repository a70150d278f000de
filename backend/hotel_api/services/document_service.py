"""PDF invoices and hotel vouchers for confirmed transactions."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from fpdf import FPDF
from fpdf.errors import FPDFException

from hotel_api.core.errors import DocumentGenerationError
from hotel_api.models import Transaction

logger = logging.getLogger(__name__)


def _latin1(value: Any) -> str:
    text = "" if value is None else str(value)
    return text.encode("latin-1", errors="replace").decode("latin-1")


def _new_document(title: str, brand: str) -> FPDF:
    pdf = FPDF()
    pdf.add_page()
    pdf.set_font("Helvetica", style="B", size=16)
    pdf.cell(0, 10, _latin1(brand), new_x="LMARGIN", new_y="NEXT")
    pdf.set_font("Helvetica", style="B", size=13)
    pdf.cell(0, 8, _latin1(title), new_x="LMARGIN", new_y="NEXT")
    pdf.ln(4)
    pdf.set_font("Helvetica", size=11)
    return pdf


def _rows(pdf: FPDF, rows: Iterable[tuple[str, Any]]) -> None:
    for label, value in rows:
        pdf.cell(70, 7, _latin1(label))
        pdf.multi_cell(0, 7, _latin1(value), new_x="LMARGIN", new_y="NEXT")


def _stay_rows(transaction: Transaction) -> list[tuple[str, Any]]:
    hotel = transaction.hotel or {}
    package = transaction.hotel_package or {}
    search = transaction.search or {}
    room_details = package.get("room_details") or {}
    contact = transaction.contact_detail or {}
    guest = " ".join(filter(None, [contact.get("name"), contact.get("last_name")]))
    return [
        ("Booking reference", transaction.id),
        ("Supplier booking id", transaction.supplier_booking_id or "-"),
        ("Hotel", hotel.get("originalName") or hotel.get("name")),
        ("Check-in", search.get("check_in_date")),
        ("Check-out", search.get("check_out_date")),
        ("Rooms", search.get("total_room_count") or search.get("room_count")),
        ("Room type", room_details.get("room_type") or "-"),
        ("Meal plan", room_details.get("food") or "-"),
        ("Lead guest", guest),
        ("Contact", contact.get("mobile")),
    ]


def generate_invoice(transaction: Transaction, *, brand: str) -> bytes:
    """Render the tax invoice for a paid booking."""
    try:
        pricing = transaction.pricing or {}
        currency = pricing.get("currency") or ""
        pdf = _new_document("Tax Invoice", brand)
        _rows(pdf, _stay_rows(transaction))
        pdf.ln(4)
        pdf.set_font("Helvetica", style="B", size=12)
        pdf.cell(0, 8, "Charges", new_x="LMARGIN", new_y="NEXT")
        pdf.set_font("Helvetica", size=11)
        _rows(
            pdf,
            [
                ("Room charges", f"{pricing.get('base_amount_discount_included')} {currency}"),
                ("Coupon discount", f"-{pricing.get('coupon_discount', 0)} {currency}"),
                ("Service charges", f"{pricing.get('service_charges', 0)} {currency}"),
                ("Processing fee", f"{pricing.get('processing_fee', 0)} {currency}"),
                ("GST", f"{pricing.get('gst', 0)} {currency}"),
                ("Total paid", f"{pricing.get('total_chargeable_amount')} {currency}"),
            ],
        )
        return bytes(pdf.output())
    except (FPDFException, AttributeError, TypeError, ValueError) as exc:
        logger.exception("Invoice generation failed for transaction %s", transaction.id)
        raise DocumentGenerationError(
            "Cannot get invoice for the given transaction"
        ) from exc


def generate_voucher(transaction: Transaction, *, brand: str) -> bytes:
    """Render the hotel voucher presented at check-in."""
    try:
        policy = (transaction.booking_policy or {}).get("cancellation_policy")
        pdf = _new_document("Hotel Voucher", brand)
        _rows(pdf, _stay_rows(transaction))
        if policy:
            pdf.ln(4)
            pdf.set_font("Helvetica", style="B", size=12)
            pdf.cell(0, 8, "Cancellation policy", new_x="LMARGIN", new_y="NEXT")
            pdf.set_font("Helvetica", size=10)
            pdf.multi_cell(0, 6, _latin1(policy), new_x="LMARGIN", new_y="NEXT")
        return bytes(pdf.output())
    except (FPDFException, AttributeError, TypeError, ValueError) as exc:
        logger.exception("Voucher generation failed for transaction %s", transaction.id)
        raise DocumentGenerationError(
            "Cannot get voucher for the given transaction"
        ) from exc
