"""
Quick User Creation
Run from project root: python create_initial_users.py

The first account created on an empty database is granted site admin access.
"""
from app import create_app
from extensions import db
from models.users import User
from blueprints.auth.forms import validate_password_strength
import getpass


def prompt_password():
    while True:
        password = getpass.getpass("Password: ").strip()
        is_valid, error_msg = validate_password_strength(password)
        if not is_valid:
            print(f"{error_msg}\n")
            continue
        if getpass.getpass("Confirm Password: ").strip() == password:
            return password
        print("Passwords don't match. Try again.\n")


def create_initial_users():
    """Create fleet manager / staff accounts interactively"""
    app = create_app()

    with app.app_context():
        existing = User.query.count()
        if existing > 0:
            print(f"{existing} user(s) already exist: {', '.join(u.email for u in User.query.all())}")
            if input("\nCreate additional users? (y/n): ").lower() != 'y':
                return

        print("\n=== Create User Accounts ===")
        print("Passwords need 10+ characters with upper and lower case letters, a number and a special character.\n")

        created = []
        while True:
            email = input("Email: ").strip().lower()
            if User.query.filter_by(email=email).first():
                print(f"{email} already exists.\n")
                continue
            name = input("Full Name: ").strip()
            user = User(email=email, name=name, is_active=True, is_site_admin=(existing == 0 and not created))
            user.set_password(prompt_password())
            db.session.add(user)
            created.append(user)

            if input("\nAdd another user? (y/n): ").lower() != 'y':
                break

        db.session.commit()
        print(f"\nCreated {len(created)} user(s):")
        for user in created:
            suffix = ' [site admin]' if user.is_site_admin else ''
            print(f"   - {user.name} ({user.email}){suffix}")


if __name__ == '__main__':
    create_initial_users()
