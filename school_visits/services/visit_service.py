# services/visit_service.py
"""
Visit record service.
Validates registration and edit payloads, resolves records by id or contact
identity, and executes create/update/delete/list against the visits table.
"""

import logging

from flask import current_app
from sqlalchemy import or_, func
from sqlalchemy.exc import SQLAlchemyError

from school_visits.extensions import db
from school_visits.forms.visit import VisitForm, IdentityForm
from school_visits.models.visit import Visit, VisitorType, PLACEHOLDER
from school_visits.services.errors import ValidationError, NotFound, StoreError

logger = logging.getLogger('visit_service')


class VisitService:
    """Service class for visit record operations."""

    @staticmethod
    def create(payload):
        """
        Validate a registration payload and persist a new visit.

        Args:
            payload: dict with childName, className, phoneNumber, fatherName,
                     email, visitorCount, visitorType and optionally visited

        Returns:
            Visit: the stored record

        Raises:
            ValidationError: required fields missing or invalid
            StoreError: the insert failed
        """
        form = VisitService._validated_form(payload)

        visit = Visit()
        VisitService._apply_form(visit, form)
        visit.visited = bool(form.visited.data)

        try:
            db.session.add(visit)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Insert failed: {str(e)}", exc_info=True)
            raise StoreError() from e

        logger.info(f"Created visit {visit.id} ({visit.visitor_type or 'unspecified'})")
        return visit

    @staticmethod
    def register(payload):
        """
        Registration flow used by the public form.
        Returns the newest record for the same email or phone when one exists,
        otherwise creates a new one.

        Returns:
            tuple: (Visit, existing) where existing is True for a prior record
        """
        form = VisitService._validated_form(payload)

        try:
            existing = VisitService.lookup_by_identity(
                email=form.email.data,
                phone_number=form.phone_number.data
            )
            logger.info(f"Registration matched existing visit {existing.id}")
            return existing, True
        except NotFound:
            pass

        return VisitService.create(payload), False

    @staticmethod
    def get(visit_id):
        """Resolve a visit by its id."""
        if not visit_id:
            raise ValidationError('id is required', fields={'id': ['Visit id is required']})

        try:
            visit = db.session.get(Visit, str(visit_id))
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Lookup failed for {visit_id}: {str(e)}", exc_info=True)
            raise StoreError() from e

        if not visit:
            raise NotFound()
        return visit

    @staticmethod
    def lookup_by_identity(email=None, phone_number=None):
        """
        Most recently created visit matching either contact key.

        Raises:
            ValidationError: neither key supplied
            NotFound: no visit matches
        """
        form = IdentityForm.from_payload({'email': email, 'phoneNumber': phone_number})
        if not form.validate():
            raise ValidationError(form.error_message(), fields=form.error_fields())

        try:
            visit = (
                VisitService.identity_query(form.email.data, form.phone_number.data)
                .first()
            )
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Identity lookup failed: {str(e)}", exc_info=True)
            raise StoreError() from e

        if not visit:
            raise NotFound()
        return visit

    @staticmethod
    def identity_query(email=None, phone_number=None):
        """
        Query for visits matching the supplied contact keys, newest first with the
        id breaking timestamp ties, one row.
        Shared with check-in so both resolve the same record.
        """
        conditions = []
        if email:
            conditions.append(Visit.email == email)
        if phone_number:
            conditions.append(Visit.phone_number == phone_number)

        return (
            db.session.query(Visit)
            .filter(or_(*conditions))
            .order_by(Visit.created_at.desc(), Visit.id.desc())
            .limit(1)
        )

    @staticmethod
    def update(visit_id, payload):
        """
        Overwrite every editable field of a visit.
        Fields absent from the payload are reset to their blank defaults.
        The visited flag can be raised but never cleared.
        """
        if not visit_id:
            raise ValidationError('id is required', fields={'id': ['Visit id is required']})

        form = VisitService._validated_form(payload)
        visit = VisitService.get(visit_id)

        VisitService._apply_form(visit, form)
        visit.visited = bool(visit.visited) or bool(form.visited.data)

        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Update failed for {visit_id}: {str(e)}", exc_info=True)
            raise StoreError() from e

        logger.info(f"Updated visit {visit.id}")
        return visit

    @staticmethod
    def delete(visit_id):
        """Remove a visit. Raises NotFound when nothing was deleted."""
        visit = VisitService.get(visit_id)

        try:
            db.session.delete(visit)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Delete failed for {visit_id}: {str(e)}", exc_info=True)
            raise StoreError() from e

        logger.info(f"Deleted visit {visit_id}")
        return {'success': True}

    @staticmethod
    def list_visits(search=None, page=1, limit=None):
        """
        Paginated listing, newest first, with an optional case-insensitive
        substring filter over the searchable columns.

        Returns:
            dict: records (Visit instances), page, limit, total
        """
        page = page if page and page > 0 else 1
        max_limit = current_app.config.get('LIST_MAX_LIMIT', 500)
        if not limit or limit < 1:
            limit = current_app.config.get('LIST_DEFAULT_LIMIT', 100)
        limit = min(limit, max_limit)

        query = db.session.query(Visit)
        if search:
            term = search.lower()
            query = query.filter(or_(*[
                func.lower(getattr(Visit, column)).contains(term, autoescape=True)
                for column in Visit.SEARCH_COLUMNS
            ]))

        try:
            total = query.order_by(None).count()
            records = (
                query.order_by(Visit.created_at.desc(), Visit.id.desc())
                .offset((page - 1) * limit)
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Listing failed: {str(e)}", exc_info=True)
            raise StoreError() from e

        return {
            'records': records,
            'page': page,
            'limit': limit,
            'total': total
        }

    # Private Helper Methods

    @staticmethod
    def _validated_form(payload):
        form = VisitForm.from_payload(payload)
        if not form.validate():
            logger.info(f"Rejected visit payload: {form.error_message()}")
            raise ValidationError(form.error_message(), fields=form.error_fields())
        return form

    @staticmethod
    def _apply_form(visit, form):
        """Copy validated form data onto the model, non-parents always get the placeholders."""
        is_parent = form.visitor_type.data == VisitorType.PARENT

        visit.child_name = form.child_name.data if is_parent else PLACEHOLDER
        visit.class_name = form.class_name.data if is_parent else PLACEHOLDER
        visit.phone_number = form.phone_number.data
        visit.father_name = form.father_name.data or ''
        visit.email = form.email.data
        visit.visitor_count = form.visitor_count.data or 0
        visit.visitor_type = form.visitor_type.data or ''
