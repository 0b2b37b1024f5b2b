"""
QR code generation service
"""

import io
import qrcode

from eventseat.core.config import settings

class QRService:
    """Service for generating QR codes"""

    @staticmethod
    def get_lookup_url(event_id: str) -> str:
        """URL of the page where guests search for their seat"""
        return f"{settings.BASE_URL.rstrip('/')}/event/{event_id}"

    @staticmethod
    def generate_event_qr(event_id: str, format: str = 'PNG') -> bytes:
        """Generate a QR code pointing at the event's guest lookup page"""
        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=4,
        )
        qr.add_data(QRService.get_lookup_url(event_id))
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")

        buffer = io.BytesIO()
        img.save(buffer, format=format)

        return buffer.getvalue()
