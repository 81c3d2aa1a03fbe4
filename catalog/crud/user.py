from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from ..exceptions import ConflictError, InvalidCredentialsError, UserNotFoundError
from ..models.user import User
from ..utils.security import get_password_hash, verify_password


def get_by_email(db: Session, *, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def create(db: Session, *, email: str, password: str) -> User:
    """Persist a new user with a salted hash; duplicate email -> ConflictError."""
    if get_by_email(db, email=email) is not None:
        raise ConflictError()

    user = User(email=email, hashed_password=get_password_hash(password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        # Lost a race against a concurrent registration of the same email
        db.rollback()
        raise ConflictError() from e
    db.refresh(user)
    return user


def authenticate(db: Session, *, email: str, password: str) -> User:
    user = get_by_email(db, email=email)
    if user is None:
        raise UserNotFoundError()
    if not verify_password(password, user.hashed_password):
        raise InvalidCredentialsError()
    return user
