"""Role-Based Access Control (RBAC) utilities."""

from enum import Enum
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, status

from canteen.core.security import COOKIE_ACCESS_NAME, decode_access_token
from canteen.db.session import DbSession


class UserRole(str, Enum):
    """User roles for RBAC."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


# Role hierarchy: admin > employee
ROLE_HIERARCHY = {
    UserRole.ADMIN: 2,
    UserRole.EMPLOYEE: 1,
}


class TokenData:
    """The authenticated actor for the current request.

    Attributes:
        user_id: The profile's database ID.
        email: The profile's email address.
        role: The profile's role (admin/employee).
        id: Alias for user_id.
        full_name: Display name (defaults to email prefix).
        employee_id: Payroll employee number, if known.
    """

    def __init__(self, user_id: int, email: str, role: UserRole,
                 full_name: str = "", employee_id: Optional[str] = None):
        self.user_id = user_id
        self.id = user_id
        self.email = email
        self.role = role
        self.full_name = full_name or email.split("@")[0]
        self.employee_id = employee_id

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def _token_from_request(request: Request) -> Optional[dict]:
    """Decode the bearer token, falling back to the access_token cookie."""
    payload = None
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header.split(" ", 1)[1]
        if token:
            payload = decode_access_token(token)

    if payload is None:
        cookie_token = request.cookies.get(COOKIE_ACCESS_NAME)
        if cookie_token:
            payload = decode_access_token(cookie_token)
    return payload


async def get_current_user(request: Request, db: DbSession) -> TokenData:
    """Get the current authenticated user from the JWT token.

    Checks in order:
    1. Authorization: Bearer <token> header
    2. access_token cookie (HttpOnly)
    """
    payload = _token_from_request(request)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    email = payload.get("email")
    role = payload.get("role")

    if user_id is None or email is None or role is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    try:
        user_role = UserRole(role)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid role in token",
        )

    # Role changes take effect immediately, not on next login
    from canteen.models.user import User
    user = db.get(User, int(user_id))
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User account is disabled",
        )
    if user.role != user_role:
        user_role = user.role

    return TokenData(
        user_id=user.id, email=user.email, role=user_role,
        full_name=user.full_name or "",
        employee_id=user.employee_id,
    )


def require_role(minimum_role: UserRole):
    """Dependency to require a minimum role level."""

    async def role_checker(
        current_user: Annotated[TokenData, Depends(get_current_user)]
    ) -> TokenData:
        user_level = ROLE_HIERARCHY.get(current_user.role, 0)
        required_level = ROLE_HIERARCHY.get(minimum_role, 0)

        if user_level < required_level:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role {minimum_role.value} or higher",
            )
        return current_user

    return role_checker


# Common role dependencies
RequireAdmin = Annotated[TokenData, Depends(require_role(UserRole.ADMIN))]
RequireEmployee = Annotated[TokenData, Depends(require_role(UserRole.EMPLOYEE))]
CurrentUser = Annotated[TokenData, Depends(get_current_user)]
