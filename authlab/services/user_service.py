from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from authlab.core import security
from authlab.db.repository import Repository
from authlab.models import User

users = Repository(User)


def get_user(db: Session, user_id: str) -> User | None:
    return users.get(db, user_id)


def get_user_or_404(db: Session, user_id: str) -> User:
    user = users.get(db, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.query(User).filter(User.username == username).first()


def list_users(db: Session) -> list[User]:
    return users.list_all(db)


def create_user(db: Session, username: str, password: str, email: str | None = None) -> User:
    if get_user_by_username(db, username):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already taken")
    try:
        return users.create(
            db,
            username=username,
            email=email or None,
            password_hash=security.hash_password(password),
        )
    except IntegrityError:
        # lost a race with a concurrent registration for the same name
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already taken")


def update_user(db: Session, user_id: str, **fields) -> User:
    get_user_or_404(db, user_id)
    username = fields.get("username")
    if username:
        existing = get_user_by_username(db, username)
        if existing and existing.id != user_id:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already taken")
    return users.update_fields(db, user_id, **fields)


def update_password(db: Session, user_id: str, new_password: str) -> User:
    get_user_or_404(db, user_id)
    return users.update_fields(db, user_id, password_hash=security.hash_password(new_password))


def delete_user(db: Session, user_id: str) -> bool:
    return users.delete(db, user_id)


def verify_password(user: User, password: str) -> bool:
    return security.verify_password(password, user.password_hash)
