# forms/visit.py
"""
Flask-WTF forms used as request schemas for the visits API.
JSON bodies and query strings are wrapped into a MultiDict and validated here
before any service touches the database. Field names follow the wire format
(camelCase) through the `name` argument.
"""

from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import StringField, IntegerField, BooleanField, SelectField
from wtforms.validators import (
    DataRequired, Length, NumberRange, Optional, ValidationError
)

from school_visits.models.visit import VisitorType
from school_visits.utils.data_processing import clean_email, clean_phone_number, clean_text_field


MAX_VISITOR_COUNT = 1000
MAX_LIST_PAGE = 100000

VISITED_TRUE_VALUES = ('true', '1')
VISITED_FALSE_VALUES = ('false', '0', '')


class VisitorCountField(IntegerField):
    """Integer field where a blank value means no accompanying guests. Fractions are rejected."""

    def process_formdata(self, valuelist):
        if not valuelist:
            return

        value = valuelist[0]
        if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
            self.data = None
            raise ValueError(self.gettext('Not a valid integer value.'))
        if str(value).strip() == '':
            self.data = 0
            return
        super().process_formdata([value])


class VisitedField(BooleanField):
    """Strict boolean: true/false, 1/0 or a JSON boolean. Anything else is an error."""

    def process_formdata(self, valuelist):
        if not valuelist:
            self.data = False
            return

        value = valuelist[0]
        if isinstance(value, bool):
            self.data = value
            return

        text = str(value).strip().lower()
        if text in VISITED_TRUE_VALUES:
            self.data = True
        elif text in VISITED_FALSE_VALUES:
            self.data = False
        else:
            self.data = False
            raise ValueError('Visited must be true or false')


class ApiForm(FlaskForm):
    """Base form for JSON payloads."""

    class Meta:
        csrf = False

    @classmethod
    def from_payload(cls, payload):
        """Build the form from a decoded JSON object or an args MultiDict."""
        if isinstance(payload, MultiDict):
            return cls(formdata=payload)

        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}

        formdata = MultiDict({key: value for key, value in payload.items() if value is not None})
        return cls(formdata=formdata)

    def error_fields(self):
        """Field errors keyed by wire name."""
        return {field.name: list(field.errors) for field in self if field.errors}

    def error_message(self):
        messages = [f"{name}: {errors[0]}" for name, errors in self.error_fields().items()]
        messages.extend(self.form_errors)
        return '; '.join(messages) or 'Invalid request'


class VisitForm(ApiForm):
    """Registration and dashboard edit payload."""

    child_name = StringField('Child Name', name='childName', filters=[clean_text_field], validators=[
        Length(max=120, message='Child name must be less than 120 characters')
    ])

    class_name = StringField('Class Name', name='className', filters=[clean_text_field], validators=[
        Length(max=60, message='Class name must be less than 60 characters')
    ])

    phone_number = StringField('Phone Number', name='phoneNumber', filters=[clean_phone_number], validators=[
        DataRequired(message='Phone number is required'),
        Length(max=30, message='Phone number must be less than 30 characters')
    ])

    father_name = StringField('Visitor Name', name='fatherName', filters=[clean_text_field], validators=[
        Length(max=120, message='Name must be less than 120 characters')
    ])

    email = StringField('Email Address', name='email', filters=[clean_email], validators=[
        DataRequired(message='Email address is required'),
        Length(max=120, message='Email must be less than 120 characters')
    ])

    visitor_count = VisitorCountField('Accompanying Visitors', name='visitorCount', default=0, validators=[
        NumberRange(min=0, max=MAX_VISITOR_COUNT,
                    message=f"Visitor count must be between 0 and {MAX_VISITOR_COUNT}")
    ])

    visitor_type = StringField('Visitor Type', name='visitorType', filters=[clean_text_field], validators=[
        Length(max=30, message='Visitor type must be less than 30 characters')
    ])

    visited = VisitedField('Visited', name='visited', default=False)

    def validate_child_name(self, field):
        if self.visitor_type.data == VisitorType.PARENT and not field.data:
            raise ValidationError('Child name is required for parents')

    def validate_class_name(self, field):
        if self.visitor_type.data == VisitorType.PARENT and not field.data:
            raise ValidationError('Class name is required for parents')

    def validate_father_name(self, field):
        if self.visitor_type.data != VisitorType.PARENT and not field.data:
            raise ValidationError('Visitor name is required')


class IdentityForm(ApiForm):
    """Contact identity used for duplicate-registration lookups."""

    phone_number = StringField('Phone Number', name='phoneNumber', filters=[clean_phone_number])
    email = StringField('Email Address', name='email', filters=[clean_email])

    def has_identity(self):
        return bool(self.phone_number.data or self.email.data)

    def validate(self, extra_validators=None):
        if not super().validate(extra_validators):
            return False

        if not self.has_identity():
            self.form_errors.append('email or phoneNumber is required')
            return False

        return True


class CheckInForm(IdentityForm):
    """Scanner payload: a direct visit id, or phone/email fallback."""

    visit_id = StringField('Visit ID', name='visitId', filters=[clean_text_field], validators=[
        Length(max=36, message='Visit id must be at most 36 characters')
    ])

    def has_identity(self):
        return bool(self.visit_id.data) or super().has_identity()

    def validate(self, extra_validators=None):
        if not super(IdentityForm, self).validate(extra_validators):
            return False

        if not self.has_identity():
            self.form_errors.append('visitId, phoneNumber or email is required')
            return False

        return True


class ListQueryForm(ApiForm):
    """Dashboard listing query string."""

    page = IntegerField('Page', name='page', default=1, validators=[
        Optional(),
        NumberRange(min=1, max=MAX_LIST_PAGE, message=f"Page must be between 1 and {MAX_LIST_PAGE}")
    ])

    limit = IntegerField('Limit', name='limit', validators=[
        Optional(),
        NumberRange(min=1, message='Limit must be at least 1')
    ])

    search = StringField('Search', name='search', filters=[clean_text_field])

    format = SelectField('Format', name='format', default='json',
                         choices=[('json', 'JSON'), ('csv', 'CSV'), ('xlsx', 'Excel')])


class UnlockForm(ApiForm):
    """Dashboard password submission."""

    password = StringField('Password', name='password', validators=[
        DataRequired(message='Password is required')
    ])
