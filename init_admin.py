#!/usr/bin/env python3
"""
Seed an admin, an approved doctor and a patient for local development.
Run with: python3 init_admin.py
"""
from sqlalchemy import select

from mindflow import create_app
from mindflow.extensions import db
from mindflow.models import Doctor, Patient, User, UserRole
from mindflow.utils.timeutils import utcnow

DEFAULT_USERS = [
    {
        'email': 'admin@mindflow.local',
        'password': 'admin123',
        'role': UserRole.ADMIN,
    },
    {
        'email': 'doctor1@mindflow.local',
        'password': 'doctor123',
        'role': UserRole.DOCTOR,
        'profile': {
            'doctor_id': 'D-1001',
            'first_name': 'Amara',
            'last_name': 'Okafor',
            'specialty': 'Clinical Psychology',
        },
    },
    {
        'email': 'patient1@mindflow.local',
        'password': 'patient123',
        'role': UserRole.PATIENT,
        'profile': {
            'patient_id': 'P-1001',
            'first_name': 'Sam',
            'last_name': 'Rivera',
            'phone_number': '',
        },
    },
]


def create_users():
    """Create default users and their profiles"""
    app = create_app()

    with app.app_context():
        db.create_all()
        print("=" * 60)
        print("Initializing MindFlow Users")
        print("=" * 60)
        print()

        created_count = 0

        for data in DEFAULT_USERS:
            email = data['email']

            existing = db.session.execute(select(User).where(User.email == email)).scalars().first()
            if existing:
                print(f"  - User '{email}' already exists (skipping)")
                continue

            user = User(email=email, role=data['role'], is_active=True)
            user.set_password(data['password'])
            db.session.add(user)
            db.session.flush()

            if data['role'] == UserRole.DOCTOR:
                db.session.add(Doctor(user_id=user.id, is_approved=True, approved_at=utcnow(), **data['profile']))
            elif data['role'] == UserRole.PATIENT:
                db.session.add(Patient(user_id=user.id, **data['profile']))

            created_count += 1
            print(f"  Created: {email} ({data['role'].value}) - Password: {data['password']}")

        db.session.commit()

        print()
        print("=" * 60)
        print(f"Created {created_count} new user(s)")
        print("=" * 60)
        print("\nIMPORTANT: Change passwords after first login!")


if __name__ == '__main__':
    create_users()
