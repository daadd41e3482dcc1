"""
Access guards.

Callers may only read data that belongs to their own verified identity.
"""

from zapshift.app.core.exceptions import InsufficientPermissionsError


def ensure_self_access(requested_email: str, verified_email: str) -> None:
    """
    Enforce that the email a query asks for is the caller's own.

    Raises:
        InsufficientPermissionsError: 403 if the emails differ
    """
    if requested_email != verified_email:
        raise InsufficientPermissionsError(details={"requested": requested_email})
