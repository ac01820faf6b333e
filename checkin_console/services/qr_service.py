"""
QR code generation and scan parsing for guest check-in
"""

import io
import json

import qrcode
from qrcode.image.pil import PilImage

from checkin_console.core.errors import InvalidScanError

class QRService:
    """Service for guest QR codes"""

    @staticmethod
    def guest_payload(guest_id: int) -> str:
        """Text encoded in a guest's QR code"""
        return json.dumps({"guestId": guest_id})

    @staticmethod
    def generate_guest_qr(guest_id: int, format: str = 'PNG') -> bytes:
        """Generate the QR code a guest shows at check-in"""
        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_L,
            box_size=10,
            border=2,
        )
        qr.add_data(QRService.guest_payload(guest_id))
        qr.make(fit=True)

        img = qr.make_image(image_factory=PilImage, fill_color="black", back_color="white")

        buffer = io.BytesIO()
        img.save(buffer, format=format)

        return buffer.getvalue()

    @staticmethod
    def parse_payload(text: str) -> int:
        """Turn scanned QR text into a guest id.

        Accepts the JSON payload produced by ``guest_payload`` as well as a
        bare number typed in by hand.
        """
        text = (text or "").strip()
        if not text:
            raise InvalidScanError("Empty QR code")

        if text.isdigit():
            guest_id = int(text)
        else:
            try:
                data = json.loads(text)
            except ValueError:
                raise InvalidScanError("Invalid QR code format")
            guest_id = data.get("guestId") if isinstance(data, dict) else None

        if isinstance(guest_id, str) and guest_id.isdigit():
            guest_id = int(guest_id)
        if not isinstance(guest_id, int) or isinstance(guest_id, bool) or guest_id <= 0:
            raise InvalidScanError("QR code does not identify a guest")
        return guest_id
