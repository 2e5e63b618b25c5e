"""Authentication routes."""

import logging

from fastapi import APIRouter, HTTPException, Request, Response, status
from sqlalchemy.exc import IntegrityError

from canteen.core.rate_limit import limiter
from canteen.core.rbac import CurrentUser, UserRole
from canteen.core.security import (
    COOKIE_ACCESS_NAME,
    create_access_token,
    get_password_hash,
    revoke_token,
    verify_password,
)
from canteen.db.session import DbSession
from canteen.models.user import User
from canteen.schemas.auth import LoginRequest, RegisterRequest, Token, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _issue_token(user: User, response: Response) -> Token:
    token = create_access_token(
        data={"sub": str(user.id), "email": user.email, "role": user.role.value}
    )
    response.set_cookie(
        COOKIE_ACCESS_NAME, token, httponly=True, samesite="lax",
    )
    return Token(access_token=token)


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("5/minute")
def register(request: Request, body: RegisterRequest, db: DbSession):
    """Create an employee profile."""
    email = body.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=400, detail="Email already registered")
    if body.employee_id and db.query(User).filter(User.employee_id == body.employee_id).first():
        raise HTTPException(status_code=400, detail="Employee ID already registered")

    user = User(
        email=email,
        password_hash=get_password_hash(body.password),
        full_name=body.full_name.strip(),
        employee_id=body.employee_id,
        role=UserRole.EMPLOYEE,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Email or employee ID already registered")
    db.refresh(user)
    logger.info(f"Registered user {user.email} (ID: {user.id})")
    return user


@router.post("/login", response_model=Token)
@limiter.limit("5/minute")
def login(request: Request, response: Response, login_request: LoginRequest, db: DbSession):
    """Authenticate user and return JWT token."""
    client_ip = request.client.host if request.client else "unknown"
    user = db.query(User).filter(User.email == login_request.email.lower()).first()

    if not user or not verify_password(login_request.password, user.password_hash):
        logger.warning(f"Failed login attempt for email: {login_request.email} from IP: {client_ip}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    if not user.is_active:
        logger.warning(f"Login attempt for inactive user: {login_request.email} (ID: {user.id}) from IP: {client_ip}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User account is inactive",
        )

    logger.info(f"Successful login: {user.email} (ID: {user.id}, role: {user.role.value}) from IP: {client_ip}")
    return _issue_token(user, response)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(request: Request, response: Response, current_user: CurrentUser):
    """Revoke the presented token and clear the session cookie."""
    auth_header = request.headers.get("Authorization", "")
    token = auth_header.split(" ", 1)[1] if auth_header.startswith("Bearer ") else None
    token = token or request.cookies.get(COOKIE_ACCESS_NAME)
    if token:
        revoke_token(token)
    response.delete_cookie(COOKIE_ACCESS_NAME)
    return None


@router.get("/me", response_model=UserResponse)
def get_me(current_user: CurrentUser, db: DbSession):
    """Get current user info."""
    user = db.get(User, current_user.user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user
