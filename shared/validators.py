"""
Input validators - framework-agnostic, pure functions.
"""

from __future__ import annotations

import validators as _validators


def normalize_email(email: str) -> str:
    """Trim and lower-case *email* so one address maps to one document key."""
    return email.strip().lower()


def validate_email_key(email: str) -> bool:
    """Return True if *email* is a valid address usable as a document id.

    Document stores reject ``/`` in ids (Firestore treats it as a path
    separator), which RFC 5322 still allows in the local part.
    """
    if not email or "/" in email:
        return False
    return bool(_validators.email(email))
