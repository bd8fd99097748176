"""
Create the first account. Registration requires a signed-in user, so a fresh
database needs one account created out of band.

Usage:
    python seed.py [--name Admin] [--email admin@example.com] [--password secret1] [--role admin]
"""
import argparse

from postboard.auth import create_access_token
from postboard.config import get_settings
from postboard.database import SessionLocal, engine, Base
from postboard.store.users import CredentialStore


def seed(name: str, email: str, password: str, role: str):
    Base.metadata.create_all(bind=engine)
    settings = get_settings()

    db = SessionLocal()
    try:
        store = CredentialStore(db, settings)
        user = store.find_by_email(email)
        if user:
            print(f"User {user.email} already exists")
        else:
            user = store.create(name=name, email=email, password=password, role=role)
            print(f"Created user {user.email} ({user.id})")
        print(f"Token: {create_access_token(user.id, settings)}")
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the initial Postboard account")
    parser.add_argument("--name", default="Admin")
    parser.add_argument("--email", default="admin@example.com")
    parser.add_argument("--password", required=True)
    parser.add_argument("--role", default="admin")
    args = parser.parse_args()
    seed(args.name, args.email, args.password, args.role)
