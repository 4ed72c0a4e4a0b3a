from __future__ import annotations

import re
from typing import Optional

from django.core.validators import RegexValidator

PHONE_PATTERN = r"^[+]?[0-9]{10,15}$"

phone_validator = RegexValidator(PHONE_PATTERN, message="Invalid phone number format")


def normalize_phone_number(raw: Optional[str]) -> str:
    """Strip the separators people type into phone numbers.

    Accepts inputs like:
    - "+919385426550"
    - "93854 26550"
    - "+1 (555) 111-2222"

    Only whitespace, dashes, dots and parentheses are removed; anything
    else is left for the validator to reject.
    """

    if not raw:
        return ""
    return re.sub(r"[\s\-().]+", "", str(raw).strip())
