"""Identity and role checks.

Authentication happens upstream; requests arrive with the signed-in user's
e-mail in the X-User-Email header. Roles are stored in user_account:
'pm' can read the agenda, 'sad' can also create, edit, delete and import.

The header is trusted as-is: the API must only be reachable through the
authenticating proxy that sets X-User-Email and strips any client-supplied
value.
"""
import logging
import os
from dataclasses import dataclass
from datetime import UTC, datetime

from fastapi import Depends, Header, HTTPException
from sqlmodel import Session, select

from db import get_session
from models import UserAccount

logger = logging.getLogger(__name__)

ROLES = ("pm", "sad")
DEFAULT_ROLE = "pm"
MANAGER_ROLE = "sad"


@dataclass
class CurrentUser:
    email: str
    role: str


def normalize_email(email: str) -> str:
    return email.strip().lower()


def admin_emails() -> set[str]:
    """E-mails from ADMIN_EMAILS that always get the manager role."""
    raw = os.getenv("ADMIN_EMAILS", "")
    return {normalize_email(e) for e in raw.split(",") if e.strip()}


def resolve_role(session: Session, email: str) -> str:
    email = normalize_email(email)
    if email in admin_emails():
        return MANAGER_ROLE
    account = session.exec(select(UserAccount).where(UserAccount.email == email)).first()
    return account.role if account else DEFAULT_ROLE


def set_user_role(session: Session, email: str, role: str) -> UserAccount:
    """Create or update the role of a user."""
    if role not in ROLES:
        raise ValueError(f"Role must be one of: {', '.join(ROLES)}")
    email = normalize_email(email)
    if not email:
        raise ValueError("Email is required")

    account = session.exec(select(UserAccount).where(UserAccount.email == email)).first()
    if account:
        account.role = role
        account.updated_at = datetime.now(UTC)
    else:
        account = UserAccount(email=email, role=role)
    session.add(account)
    session.commit()
    session.refresh(account)
    logger.info(f"Role {role!r} set for {email}")
    return account


def get_current_user(
    x_user_email: str | None = Header(default=None),
    session: Session = Depends(get_session),
) -> CurrentUser:
    if not x_user_email or not x_user_email.strip():
        raise HTTPException(status_code=401, detail="Not authenticated")
    email = normalize_email(x_user_email)
    return CurrentUser(email=email, role=resolve_role(session, email))


def require_role(role: str):
    """Dependency factory rejecting users without the given role."""

    def checker(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role != role:
            logger.info(f"Access denied for {user.email} (role={user.role}, required={role})")
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return user

    return checker
