import pytest

from school_visits import create_app
from school_visits.extensions import db


VISITOR_PAYLOAD = {
    'childName': '',
    'className': '',
    'phoneNumber': '555-0100',
    'fatherName': 'Raj',
    'email': 'raj@x.com',
    'visitorType': 'Visitor',
    'visitorCount': '2',
}

PARENT_PAYLOAD = {
    'childName': 'Asha',
    'className': 'Grade 5',
    'phoneNumber': '555-0200',
    'fatherName': '',
    'email': 'priya@x.com',
    'visitorType': 'Parent',
    'visitorCount': 1,
}


@pytest.fixture
def app():
    app = create_app('testing')

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_visit(app):
    from school_visits.services.visit_service import VisitService

    def _make(base=None, **overrides):
        payload = dict(base or VISITOR_PAYLOAD)
        payload.update(overrides)
        return VisitService.create(payload)

    return _make
