# services/qr_code_service.py
"""
QR credential service.
Builds the JSON credential a visitor presents at the gate, renders it as a PNG
(plain code or a printable card) and decodes scanned text back into the fields
check-in needs.
"""

import os
import io
import json
import logging
from datetime import datetime

import qrcode
from flask import current_app
from PIL import Image, ImageDraw, ImageFont

from school_visits.models.visit import Visit, PLACEHOLDER
from school_visits.services.errors import MalformedCredential
from school_visits.utils.data_processing import slugify

logger = logging.getLogger('qr_code_service')


class QRCodeService:
    """Service for building, rendering and decoding visit credentials."""

    @staticmethod
    def build_payload(record):
        """
        Credential payload for a visit.

        Args:
            record: Visit instance or a dict in API (camelCase) or column (snake_case) form

        Returns:
            dict: visitId, childName, className, fatherName, phoneNumber,
                  visitorCount (string), visitorType, timestamp
        """
        data = record.to_api_dict() if isinstance(record, Visit) else dict(record or {})

        def pick(*keys, default=''):
            for key in keys:
                value = data.get(key)
                if value is not None and value != '':
                    return value
            return default

        visitor_count = pick('visitorCount', 'visitor_count', default=0)

        return {
            'visitId': str(pick('visitId', 'id')),
            'childName': pick('childName', 'child_name', default=PLACEHOLDER),
            'className': pick('className', 'class_name', default=PLACEHOLDER),
            'fatherName': pick('fatherName', 'father_name'),
            'phoneNumber': pick('phoneNumber', 'phone_number'),
            'visitorCount': str(visitor_count),
            'visitorType': pick('visitorType', 'visitor_type'),
            'timestamp': pick('timestamp', 'createdAt', 'created_at', default=datetime.now().isoformat()),
        }

    @staticmethod
    def encode(payload):
        """Serialize a credential payload to the text stored in the code."""
        return json.dumps(payload, separators=(',', ':'))

    @staticmethod
    def decode(qr_content):
        """
        Parse scanned text into identifying fields.

        Returns:
            dict: visit_id, phone_number, email, child_name and the raw data

        Raises:
            MalformedCredential: not a JSON object, or no visit id and no phone number
        """
        try:
            data = json.loads(qr_content)
        except (TypeError, ValueError):
            logger.info("Rejected scan: content is not JSON")
            raise MalformedCredential('QR code is not a visit credential.')

        if not isinstance(data, dict):
            raise MalformedCredential('QR code is not a visit credential.')

        visit_id = data.get('visitId') or data.get('id')
        phone_number = data.get('phoneNumber') or data.get('phone_number')

        if not visit_id and not phone_number:
            logger.info("Rejected scan: credential has no visit id or phone number")
            raise MalformedCredential('QR code does not include a visit id or phone number.')

        return {
            'visit_id': str(visit_id) if visit_id else None,
            'phone_number': str(phone_number) if phone_number else None,
            'email': data.get('email') or None,
            'child_name': data.get('childName') or data.get('child_name') or '',
            'data': data
        }

    @staticmethod
    def make_image(qr_text):
        """Rasterize credential text into a PIL image."""
        qr = qrcode.QRCode(
            version=None,
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=current_app.config.get('QR_BOX_SIZE', 10),
            border=current_app.config.get('QR_BORDER', 2),
        )
        qr.add_data(qr_text)
        qr.make(fit=True)

        return qr.make_image(fill_color="black", back_color="white").convert("RGB")

    @staticmethod
    def render_png(qr_text):
        """PNG bytes of the bare code."""
        return QRCodeService._to_png(QRCodeService.make_image(qr_text))

    @staticmethod
    def render_card(record):
        """
        Printable credential: header with the school name (and logo when configured),
        the code, then a footer naming the visitor and their guest count.
        Presentation only, the code carries the whole credential.
        """
        payload = QRCodeService.build_payload(record)
        code = QRCodeService.make_image(QRCodeService.encode(payload))

        padding = 16
        header_height = 92
        footer_height = 68
        qr_size = code.size[0]

        canvas_width = qr_size + padding * 2
        canvas_height = header_height + qr_size + footer_height + padding * 2

        canvas = Image.new('RGB', (canvas_width, canvas_height), 'white')
        draw = ImageDraw.Draw(canvas)

        title_font = QRCodeService._load_font(20)
        body_font = QRCodeService._load_font(16)

        # Header
        text_top = padding
        logo = QRCodeService._load_logo(max_height=header_height - 36)
        if logo:
            canvas.paste(logo, ((canvas_width - logo.size[0]) // 2, padding))
            text_top = padding + logo.size[1] + 6
        QRCodeService._draw_centered(draw, current_app.config.get('SITE_NAME', ''), text_top,
                                     canvas_width, title_font)

        # Code
        canvas.paste(code, (padding, header_height + padding))

        # Footer
        footer_top = header_height + padding + qr_size + 8
        if isinstance(record, Visit):
            name = record.display_name
        elif payload['childName'] != PLACEHOLDER:
            name = payload['childName']
        else:
            name = payload['fatherName'] or 'Visitor'
        QRCodeService._draw_centered(draw, name, footer_top, canvas_width, body_font)
        QRCodeService._draw_centered(draw, f"Accompanying visitors: {payload['visitorCount']}",
                                     footer_top + 26, canvas_width, body_font)

        return QRCodeService._to_png(canvas)

    @staticmethod
    def download_name(record):
        """File name offered when a credential is downloaded."""
        payload = QRCodeService.build_payload(record)
        child_name = payload['childName'] if payload['childName'] != PLACEHOLDER else ''
        return f"visitor-{slugify(child_name)}.png"

    # Private Helper Methods

    @staticmethod
    def _to_png(image):
        buffer = io.BytesIO()
        image.save(buffer, format='PNG')
        return buffer.getvalue()

    @staticmethod
    def _load_font(size):
        try:
            return ImageFont.truetype("Arial", size)
        except IOError:
            return ImageFont.load_default()

    @staticmethod
    def _load_logo(max_height):
        """Configured header logo scaled to fit, or None."""
        logo_path = current_app.config.get('CREDENTIAL_LOGO_PATH')
        if not logo_path or not os.path.isfile(logo_path):
            return None

        try:
            logo = Image.open(logo_path).convert('RGBA')
        except (IOError, OSError) as e:
            logger.warning(f"Could not load credential logo {logo_path}: {str(e)}")
            return None

        logo.thumbnail((max_height * 3, max_height))
        background = Image.new('RGB', logo.size, 'white')
        background.paste(logo, mask=logo.split()[3])
        return background

    @staticmethod
    def _draw_centered(draw, text, top, width, font):
        if not text:
            return
        left, _, right, _ = draw.textbbox((0, 0), text, font=font)
        draw.text(((width - (right - left)) // 2, top), text, fill="black", font=font)
