"""
QR code generation service
"""

import io
import qrcode

from app.core.config import settings

class QRService:
    """Service for generating attendance check-in QR codes"""

    @staticmethod
    def get_checkin_url(qr_code_id: str) -> str:
        """Get the URL that the QR code will open"""
        return f"{settings.FRONTEND_URL}/qr-attendance?code={qr_code_id}"

    @staticmethod
    def generate_event_qr(qr_code_id: str, format: str = 'PNG') -> bytes:
        """Generate QR code pointing at the event's check-in page"""
        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_L,
            box_size=10,
            border=4,
        )
        qr.add_data(QRService.get_checkin_url(qr_code_id))
        qr.make(fit=True)

        # Create QR code image
        img = qr.make_image(fill_color="black", back_color="white")

        # Convert to bytes
        buffer = io.BytesIO()
        img.save(buffer, format=format)

        return buffer.getvalue()
