"""
Public API routes - no authentication required
"""

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.services.errors import NotFound
from app.services.qr_service import QRService
from app.services.repositories import EventRepo

router = APIRouter()

@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok"}

@router.get("/events/{qr_code_id}/qr.png")
async def get_qr_code(
    qr_code_id: str,
    db: Session = Depends(get_db)
):
    """Get the check-in QR code image for an event"""
    # Verify event exists
    if not EventRepo(db).qr_code_exists(qr_code_id):
        raise NotFound("Event not found")

    # Generate QR code
    qr_bytes = QRService.generate_event_qr(qr_code_id)

    return Response(
        content=qr_bytes,
        media_type="image/png",
        headers={"Content-Disposition": f"inline; filename=qr_{qr_code_id}.png"}
    )
