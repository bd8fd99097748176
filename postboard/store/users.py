"""
Credential store: user records keyed by lowercase email.
"""
from typing import Optional
from fastapi import Depends
from sqlalchemy.orm import Session

from ..auth import get_password_hash, verify_password
from ..config import Settings, get_settings
from ..database import get_db
from ..logging_config import db_logger
from ..models.user import User


class CredentialStore:
    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings

    def get(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.lower()).first()

    def create(self, name: str, email: str, password: str, role: Optional[str] = None) -> User:
        """Persist a new user with a salted hash of the password."""
        user = User(
            name=name,
            email=email.lower(),
            password=get_password_hash(password, self.settings),
            role=role,
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        db_logger.info("Registered user", user_id=user.id)
        return user

    def authenticate(self, email: str, password: str) -> Optional[User]:
        user = self.find_by_email(email)
        if not user or not verify_password(password, user.password, self.settings):
            return None
        return user

    def change_password(self, user: User, new_password: str) -> User:
        user.password = get_password_hash(new_password, self.settings)
        self.db.commit()
        self.db.refresh(user)
        db_logger.info("Changed password", user_id=user.id)
        return user


def get_credential_store(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> CredentialStore:
    return CredentialStore(db, settings)
