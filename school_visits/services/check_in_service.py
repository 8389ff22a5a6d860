# services/check_in_service.py
"""
Check-in service for scanned visitor credentials.
Resolves a visit by id, or by phone/email with the newest row winning,
and marks it as visited. Re-scans are safe: the flag is set, never toggled.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from school_visits.extensions import db
from school_visits.forms.visit import CheckInForm
from school_visits.models.visit import Visit
from school_visits.services.errors import ValidationError, NotFound, StoreError
from school_visits.services.qr_code_service import QRCodeService
from school_visits.services.visit_service import VisitService

logger = logging.getLogger('check_in_service')


class CheckInService:
    """Service class for arrival check-ins."""

    @staticmethod
    def check_in(visit_id=None, phone_number=None, email=None):
        """
        Mark a visit as arrived.

        Args:
            visit_id: direct visit id; when given, phone/email are ignored
            phone_number: fallback identity key
            email: fallback identity key

        Returns:
            dict: id, visited, childName, phoneNumber, email

        Raises:
            ValidationError: no identifier supplied
            NotFound: nothing matches
            StoreError: the update failed
        """
        form = CheckInForm.from_payload({
            'visitId': visit_id,
            'phoneNumber': phone_number,
            'email': email
        })
        if not form.validate():
            raise ValidationError(form.error_message(), fields=form.error_fields())

        if form.visit_id.data:
            query = db.session.query(Visit).filter(Visit.id == form.visit_id.data)
            method = 'id'
        else:
            query = VisitService.identity_query(form.email.data, form.phone_number.data)
            method = 'identity'

        try:
            # Row lock where the database supports it
            visit = query.with_for_update().first()

            if not visit:
                logger.warning(f"Check-in failed: no visit for {method} lookup")
                raise NotFound()

            already_visited = bool(visit.visited)
            visit.visited = True
            db.session.commit()

        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Check-in failed: {str(e)}", exc_info=True)
            raise StoreError() from e
        except NotFound:
            db.session.rollback()
            raise

        if already_visited:
            logger.info(f"Repeat check-in for visit {visit.id}")
        else:
            logger.info(f"Checked in visit {visit.id} via {method}")

        return {
            'id': visit.id,
            'visited': bool(visit.visited),
            'childName': visit.child_name,
            'phoneNumber': visit.phone_number,
            'email': visit.email
        }

    @staticmethod
    def check_in_credential(qr_content):
        """
        Decode scanned credential text and check the visit in.
        A malformed credential is rejected before the database is touched.
        """
        credential = QRCodeService.decode(qr_content)

        return CheckInService.check_in(
            visit_id=credential['visit_id'],
            phone_number=credential['phone_number'],
            email=credential['email']
        )
