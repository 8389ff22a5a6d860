# models/visit.py
from sqlalchemy import Index

from school_visits.extensions import db
from .base import BaseModel


class VisitorType:
    """Known visitor types. Storage accepts free text."""
    PARENT = 'Parent'
    VISITOR = 'Visitor'
    ALUMNUS = 'Alumnus'
    OTHER = 'Other'

    ALL = (PARENT, VISITOR, ALUMNUS, OTHER)


PLACEHOLDER = 'N/A'


class Visit(BaseModel):
    __tablename__ = 'visits'

    child_name = db.Column(db.String(120), nullable=False, default=PLACEHOLDER)
    class_name = db.Column(db.String(60), nullable=False, default=PLACEHOLDER)
    phone_number = db.Column(db.String(30), nullable=False, default='', index=True)
    father_name = db.Column(db.String(120), nullable=False, default='')
    email = db.Column(db.String(120), nullable=False, default='', index=True)
    visitor_count = db.Column(db.Integer, nullable=False, default=0)
    visitor_type = db.Column(db.String(30), nullable=False, default='')
    visited = db.Column(db.Boolean, nullable=False, default=False, index=True)

    __table_args__ = (
        # Identity lookups read the newest row for a contact
        Index('idx_visits_phone_created', 'phone_number', 'created_at'),
        Index('idx_visits_email_created', 'email', 'created_at'),
    )

    # Searchable columns for the dashboard listing
    SEARCH_COLUMNS = ('child_name', 'class_name', 'father_name', 'email', 'phone_number', 'visitor_type')

    # Export column order
    EXPORT_FIELDS = ('id', 'childName', 'className', 'fatherName', 'phoneNumber', 'email',
                     'visitorCount', 'visitorType', 'visited', 'createdAt')

    @property
    def is_parent(self):
        return self.visitor_type == VisitorType.PARENT

    @property
    def display_name(self):
        """Name shown on credential cards: the child for parents, otherwise the visitor."""
        if self.is_parent and self.child_name and self.child_name != PLACEHOLDER:
            return self.child_name
        return self.father_name or 'Visitor'

    def to_api_dict(self):
        """Serialize with the camelCase names used by the HTTP API."""
        return {
            'id': self.id,
            'childName': self.child_name,
            'className': self.class_name,
            'fatherName': self.father_name,
            'phoneNumber': self.phone_number,
            'email': self.email,
            'visitorCount': self.visitor_count,
            'visitorType': self.visitor_type,
            'visited': bool(self.visited),
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        status = "Visited" if self.visited else "Expected"
        return f'<Visit {self.id} {self.phone_number or self.email} - {status}>'
