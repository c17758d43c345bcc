"""
Script to create an admin account, or promote an existing one
Usage: python scripts/create_admin.py admin@example.com <password> [first_name] [last_name]
"""

import sys
import os

# Add project root to Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from staybook import create_app
from extensions import db
from staybook.models.user import User


def create_admin(email, password, first_name='Admin', last_name='User'):
    """Create or promote an admin by email"""
    app = create_app()

    with app.app_context():
        user = User.query.filter_by(email=email.strip().lower()).first()

        if user:
            user.is_admin = True
            user.is_active = True
            user.set_password(password)
            db.session.commit()
            print(f"✓ Promoted '{user.email}' to admin and reset the password")
            return True

        user = User(email=email, password=password, first_name=first_name,
                    last_name=last_name, is_admin=True)
        db.session.add(user)
        db.session.commit()

        print(f"✅ Created admin '{user.email}'")
        print(f"   Name: {user.full_name}")
        return True


if __name__ == '__main__':
    if len(sys.argv) < 3:
        print("Usage: python scripts/create_admin.py <email> <password> [first_name] [last_name]")
        print("Example: python scripts/create_admin.py admin@example.com s3cret")
        sys.exit(1)

    create_admin(*sys.argv[1:5])
