"""Parsing of ``Name <email>`` commit identities."""

from __future__ import annotations

import re

from pydantic import ValidationError

from .errors import IdentityError
from .models.deploy import CommitIdentity

_ANGLE_RE = re.compile(r"^(?P<name>[^<>]*?)\s*<(?P<email>[^<>\s]+)>$")
_BARE_RE = re.compile(r"^(?P<email>[^<>\s,]+@[^<>\s,]+)$")


def parse_identity(value: str) -> CommitIdentity:
    """Parse a single free-form identity string.

    ``"Jane Doe <jane@example.com>"`` gives name ``Jane Doe``; a bare
    ``jane@example.com`` uses the local part as the name.

    Raises:
        IdentityError: If the string holds no address, more than one, or an
            address without ``@``.
    """
    text = (value or "").strip()
    match = _ANGLE_RE.match(text)
    if match:
        name = match.group("name").strip().strip('"').strip()
        email = match.group("email")
    else:
        match = _BARE_RE.match(text)
        if not match:
            raise IdentityError(value)
        email = match.group("email")
        name = ""

    if not name:
        name = email.split("@", 1)[0]

    try:
        return CommitIdentity(name=name, email=email)
    except ValidationError as e:
        raise IdentityError(value) from e
