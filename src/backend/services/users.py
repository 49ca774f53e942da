"""
Users who document events (receptionists)
"""
import logging
from typing import List

from sqlalchemy.orm import Session

from ..errors import ConflictError
from ..models import User
from ..schemas import UserIn

logger = logging.getLogger(__name__)


def create_user(db: Session, data: UserIn) -> User:
    email = data.email.strip().lower()
    if db.query(User).filter(User.email == email).first() is not None:
        raise ConflictError(f"A user with email {email} already exists")

    user = User(
        email=email,
        first_name=data.first_name.strip(),
        last_name=data.last_name.strip(),
        role=data.role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("✅ User created: %s", user.email)
    return user


def list_receptionists(db: Session) -> List[User]:
    return (
        db.query(User)
        .filter(User.active == True)  # noqa: E712
        .order_by(User.last_name.asc(), User.first_name.asc())
        .all()
    )
