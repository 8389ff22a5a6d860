# models/base.py
from datetime import datetime
import uuid

from school_visits.extensions import db


def generate_id():
    return str(uuid.uuid4())


class BaseModel(db.Model):
    """Shared columns: string UUID key, creation and last-edit timestamps."""

    __abstract__ = True

    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    created_at = db.Column(db.DateTime, default=datetime.now, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)
