import re

WHITESPACE_RUN = re.compile(r'\s+')
NON_SLUG_RUN = re.compile(r'[^a-z0-9]+')


def clean_text_field(text):
    """Trim and collapse inner whitespace. None becomes an empty string."""
    if not text:
        return ""

    return WHITESPACE_RUN.sub(' ', str(text).strip())


def clean_phone_number(phone):
    """Identity key: whitespace cleaned, digits and punctuation kept as entered."""
    return clean_text_field(phone)


def clean_email(email):
    """Lookup form of an email address: trimmed and lower-cased."""
    return clean_text_field(email).lower()


def slugify(value, fallback='visitor'):
    """Lowercase, non-alphanumeric runs collapsed to '-', used for download names."""
    slug = NON_SLUG_RUN.sub('-', str(value or '').lower()).strip('-')
    return slug or fallback
