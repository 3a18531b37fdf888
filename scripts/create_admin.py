# create_admin.py

import os
import sys
from getpass import getpass

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from werkzeug.security import generate_password_hash

from app import app
from ats_app.models import User


def create_admin():
    with app.app_context():
        username = input("Enter username: ").strip()
        email = input("Enter email: ").strip()
        first_name = input("Enter first name (optional): ").strip() or None
        last_name = input("Enter last name (optional): ").strip() or None

        if User.query.filter_by(username=username).first():
            print("Error: Username already exists.")
            sys.exit(1)

        if User.query.filter_by(email=email).first():
            print("Error: Email already exists.")
            sys.exit(1)

        password = getpass("Enter password: ")
        password2 = getpass("Confirm password: ")

        if password != password2:
            print("Error: Passwords do not match.")
            sys.exit(1)

        if not password:
            print("Error: Password cannot be empty.")
            sys.exit(1)

        admin_user, error = User.safe_create(
            username=username,
            email=email,
            first_name=first_name,
            last_name=last_name,
            password_hash=generate_password_hash(password),
            is_active=True,
            is_super_admin=True,
        )

        if error:
            print(f"Error creating admin account: {error}")
            sys.exit(1)
        else:
            print("✅ Reviewer account created successfully!")
            print(f"   Username: {admin_user.username}")
            print(f"   Email: {admin_user.email}")
            print(f"   Name on transfer requests: {admin_user.full_name}")


if __name__ == "__main__":
    create_admin()
