"""Request identity.

Token issuance lives outside this service; the gateway in front of it
forwards the verified caller as headers:

    X-User-Id    authenticated user id
    X-User-Role  "customer" or "vendor"
    X-Guest-Id   anonymous shopper id (used when no user is signed in)
"""

from dataclasses import dataclass

from fastapi import Header

from marketplace.exceptions import AuthorizationError

VENDOR_ROLE = "vendor"


@dataclass(frozen=True)
class Caller:
    user_id: str | None = None
    role: str | None = None
    guest_id: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id)

    @property
    def is_vendor(self) -> bool:
        return self.is_authenticated and self.role == VENDOR_ROLE

    @property
    def vendor_id(self) -> str | None:
        return self.user_id if self.is_vendor else None

    def require_user(self) -> str:
        if not self.is_authenticated:
            raise AuthorizationError("Not authorized")
        return self.user_id

    def require_vendor(self, action: str = "access this route") -> str:
        if not self.is_vendor:
            raise AuthorizationError(f"Forbidden: Only vendors can {action}")
        return self.user_id


def get_caller(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
    x_guest_id: str | None = Header(default=None),
) -> Caller:
    return Caller(user_id=x_user_id or None, role=(x_user_role or "").lower() or None, guest_id=x_guest_id or None)
