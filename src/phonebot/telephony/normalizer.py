"""
Phone number normalization for the telephony bridge.
"""

SUFFIX_LENGTH = 5


def normalize_phone(raw: str | None) -> str | None:
    """Take only the last five digits of a phone number.

    Hyphens are stripped before truncation. Inputs shorter than five
    characters (including empty ones) are returned unchanged. No numeric
    validation is done.

    >>> normalize_phone("123-45-6789")
    '56789'
    >>> normalize_phone("42")
    '42'
    """
    if not raw or len(raw) < SUFFIX_LENGTH:
        return raw

    return raw.replace("-", "")[-SUFFIX_LENGTH:]
