import json

import pytest

from school_visits.extensions import db
from school_visits.models import Visit
from school_visits.services.check_in_service import CheckInService
from school_visits.services.errors import ValidationError, NotFound, MalformedCredential


class TestCheckInService:

    def test_check_in_by_id(self, make_visit):
        visit = make_visit()

        result = CheckInService.check_in(visit_id=visit.id)

        assert result == {
            'id': visit.id,
            'visited': True,
            'childName': 'N/A',
            'phoneNumber': '555-0100',
            'email': 'raj@x.com'
        }
        assert db.session.get(Visit, visit.id).visited is True

    def test_check_in_is_idempotent(self, make_visit):
        visit = make_visit()

        first = CheckInService.check_in(phone_number='555-0100')
        second = CheckInService.check_in(phone_number='555-0100')

        assert first == second
        assert second['visited'] is True
        assert db.session.get(Visit, visit.id).visited is True

    def test_fallback_picks_most_recent(self, make_visit):
        older = make_visit(fatherName='First')
        newer = make_visit(fatherName='Second')

        result = CheckInService.check_in(email='raj@x.com')

        assert result['id'] == newer.id
        assert db.session.get(Visit, older.id).visited is False

    def test_id_path_does_not_fall_back_to_phone(self, make_visit):
        visit = make_visit()

        with pytest.raises(NotFound):
            CheckInService.check_in(visit_id='does-not-exist', phone_number='555-0100')

        assert db.session.get(Visit, visit.id).visited is False

    def test_unknown_identity(self, make_visit):
        make_visit()

        with pytest.raises(NotFound) as exc_info:
            CheckInService.check_in(phone_number='000')

        assert exc_info.value.to_dict()['error'] == 'Visit not found'

    def test_requires_an_identifier(self, app):
        with pytest.raises(ValidationError):
            CheckInService.check_in()


class TestCredentialCheckIn:

    def test_scanned_credential_checks_in(self, make_visit):
        visit = make_visit()
        qr_content = json.dumps({'visitId': visit.id, 'phoneNumber': '555-0100', 'childName': 'N/A'})

        result = CheckInService.check_in_credential(qr_content)

        assert result['id'] == visit.id
        assert result['visited'] is True

    def test_credential_without_id_uses_phone(self, make_visit):
        visit = make_visit()

        result = CheckInService.check_in_credential(json.dumps({'phone_number': '555-0100'}))
        assert result['id'] == visit.id

    def test_malformed_credential_is_rejected_before_the_store(self, make_visit, monkeypatch):
        visit = make_visit()

        def fail(*args, **kwargs):
            raise AssertionError('check_in must not be called')

        monkeypatch.setattr(CheckInService, 'check_in', staticmethod(fail))

        with pytest.raises(MalformedCredential):
            CheckInService.check_in_credential(json.dumps({'childName': 'Asha'}))

        assert db.session.get(Visit, visit.id).visited is False


class TestCheckInEndpoint:

    def test_check_in_by_phone(self, client, make_visit):
        make_visit()

        response = client.post('/visits/check-in', json={'phoneNumber': '555-0100'})

        assert response.status_code == 200
        data = response.get_json()
        assert data['success'] is True
        assert data['visited'] is True
        assert data['phoneNumber'] == '555-0100'
        assert data['email'] == 'raj@x.com'

    def test_repeat_scan_succeeds(self, client, make_visit):
        visit = make_visit()

        client.post('/visits/check-in', json={'visitId': visit.id})
        response = client.post('/visits/check-in', json={'visitId': visit.id})

        assert response.status_code == 200
        assert response.get_json()['visitId'] == visit.id
        assert response.get_json()['visited'] is True

    def test_unknown_visit(self, client):
        response = client.post('/visits/check-in', json={'visitId': 'does-not-exist'})

        assert response.status_code == 404
        assert response.get_json()['error'] == 'Visit not found'

    def test_missing_identifier(self, client):
        response = client.post('/visits/check-in', json={})

        assert response.status_code == 400
        assert 'visitId' in response.get_json()['error']

    def test_invalid_json(self, client):
        response = client.post('/visits/check-in', data='{not json', content_type='application/json')

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Invalid JSON body'
