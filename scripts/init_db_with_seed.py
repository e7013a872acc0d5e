import sys
import os
import argparse
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.security import get_password_hash
from app.db.database import Base, engine, SessionLocal
from app.db.models import User, UserRole

def create_tables():
    """Create all tables"""
    try:
        Base.metadata.create_all(bind=engine)
        print("All tables created successfully")
    except Exception as e:
        print(f"Error creating tables: {e}")
        sys.exit(1)

def create_admin(email: str, password: str, full_name: str):
    """Create an admin user unless one with the same email exists"""
    db = SessionLocal()
    try:
        if db.query(User).filter(User.email == email).first():
            print(f"User {email} already exists")
            return

        admin = User(
            email=email,
            hashed_password=get_password_hash(password),
            full_name=full_name,
            role=UserRole.ADMIN.value,
            is_active=True,
        )
        db.add(admin)
        db.commit()
        print(f"Admin user created: {email}")
    except Exception as e:
        db.rollback()
        print(f"Error creating admin user: {e}")
        sys.exit(1)
    finally:
        db.close()

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create tables and an admin account")
    parser.add_argument("--email", default="admin@docchat.io")
    parser.add_argument("--password", required=True)
    parser.add_argument("--full-name", default="Admin User")
    args = parser.parse_args()

    create_tables()
    create_admin(args.email, args.password, args.full_name)
