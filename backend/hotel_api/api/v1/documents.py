"""Invoice and voucher downloads."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_api.api import deps
from hotel_api.core.config import Settings
from hotel_api.models import User
from hotel_api.services import booking_service, document_service

router = APIRouter()

PDF_MEDIA_TYPE = "application/pdf"


def _pdf(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type=PDF_MEDIA_TYPE,
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )


@router.get("/invoice", summary="Download the invoice of a confirmed booking")
async def invoice(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
    settings: Annotated[Settings, Depends(deps.get_app_settings)],
    transaction_id: Annotated[str | None, Query(alias="transactionid")] = None,
) -> Response:
    transaction = await booking_service.get_confirmed_transaction(
        session, transaction_id=transaction_id, user_id=current_user.id, document="invoice"
    )
    content = document_service.generate_invoice(transaction, brand=settings.brand_name)
    return _pdf(content, f"invoice-{transaction.id}.pdf")


@router.get("/voucher", summary="Download the hotel voucher of a confirmed booking")
async def voucher(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
    settings: Annotated[Settings, Depends(deps.get_app_settings)],
    transaction_id: Annotated[str | None, Query(alias="transactionid")] = None,
) -> Response:
    transaction = await booking_service.get_confirmed_transaction(
        session, transaction_id=transaction_id, user_id=current_user.id, document="voucher"
    )
    content = document_service.generate_voucher(transaction, brand=settings.brand_name)
    return _pdf(content, f"voucher-{transaction.id}.pdf")
