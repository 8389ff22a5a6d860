import io
import json

import pytest
from PIL import Image

from school_visits.services.errors import MalformedCredential
from school_visits.services.qr_code_service import QRCodeService

from .conftest import PARENT_PAYLOAD

PNG_SIGNATURE = b'\x89PNG\r\n\x1a\n'


class TestPayload:

    def test_payload_from_visit(self, make_visit):
        visit = make_visit()

        payload = QRCodeService.build_payload(visit)

        assert payload == {
            'visitId': visit.id,
            'childName': 'N/A',
            'className': 'N/A',
            'fatherName': 'Raj',
            'phoneNumber': '555-0100',
            'visitorCount': '2',
            'visitorType': 'Visitor',
            'timestamp': visit.created_at.isoformat(),
        }

    def test_payload_from_column_dict_fills_defaults(self, app):
        payload = QRCodeService.build_payload({'id': 42, 'phone_number': '555', 'visitor_count': 0})

        assert payload['visitId'] == '42'
        assert payload['phoneNumber'] == '555'
        assert payload['visitorCount'] == '0'
        assert payload['childName'] == 'N/A'
        assert payload['timestamp']

    def test_encoded_credential_decodes_to_the_same_visit(self, make_visit):
        visit = make_visit()

        credential = QRCodeService.decode(QRCodeService.encode(QRCodeService.build_payload(visit)))

        assert credential['visit_id'] == visit.id
        assert credential['phone_number'] == '555-0100'
        assert credential['data']['visitorCount'] == '2'


class TestDecode:

    def test_accepts_id_alias(self):
        credential = QRCodeService.decode(json.dumps({'id': 'abc'}))

        assert credential['visit_id'] == 'abc'
        assert credential['phone_number'] is None

    def test_phone_only(self):
        credential = QRCodeService.decode(json.dumps({'phoneNumber': '555-0100', 'email': 'a@x.com'}))

        assert credential['visit_id'] is None
        assert credential['phone_number'] == '555-0100'
        assert credential['email'] == 'a@x.com'

    @pytest.mark.parametrize('qr_content', [
        json.dumps({'childName': 'Asha', 'email': 'a@x.com'}),
        json.dumps(['abc']),
        'not json at all',
        '',
    ])
    def test_rejects_credentials_without_identity(self, qr_content):
        with pytest.raises(MalformedCredential):
            QRCodeService.decode(qr_content)


class TestRendering:

    def test_render_png(self, app):
        image = QRCodeService.render_png('{"visitId":"abc"}')

        assert image.startswith(PNG_SIGNATURE)

    def test_card_adds_header_and_footer(self, make_visit):
        visit = make_visit(PARENT_PAYLOAD)
        payload_text = QRCodeService.encode(QRCodeService.build_payload(visit))

        plain = Image.open(io.BytesIO(QRCodeService.render_png(payload_text)))
        card = Image.open(io.BytesIO(QRCodeService.render_card(visit)))

        assert card.size[1] > plain.size[1]
        assert card.size[0] > plain.size[0]

    def test_download_name(self, make_visit):
        assert QRCodeService.download_name(make_visit(PARENT_PAYLOAD, childName='Asha  Rao!')) == 'visitor-asha-rao.png'
        assert QRCodeService.download_name(make_visit()) == 'visitor-visitor.png'
