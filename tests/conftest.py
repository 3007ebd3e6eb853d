"""
Shared test fixtures.

Provides: app with an in-memory SQLite database, user/doctor/patient factories,
bearer-token headers and a fixed clock.
"""
from datetime import datetime, timedelta
from itertools import count

import pytest
from flask_jwt_extended import create_access_token

from mindflow import create_app
from mindflow.extensions import db as _db
from mindflow.models import Doctor, Patient, SessionMode, User, UserRole
from mindflow.services import get_services

# A fixed "now" keeps session ids and join windows deterministic
NOW = datetime(2025, 6, 1, 12, 0, 0)

_sequence = count(1)


@pytest.fixture
def app():
    """Flask app bound to a fresh in-memory database."""
    app = create_app('testing')
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def services(app):
    return get_services()


@pytest.fixture
def now():
    return NOW


def _make_user(role, email=None, password='secret123', is_active=True):
    n = next(_sequence)
    user = User(email=email or f'{role.value}{n}@example.com', role=role, is_active=is_active)
    user.set_password(password)
    _db.session.add(user)
    _db.session.flush()
    return user


@pytest.fixture
def make_doctor(app):
    """Factory: approved doctor by default."""
    def _make(approved=True, first_name='Amara', last_name='Okafor', email=None):
        user = _make_user(UserRole.DOCTOR, email=email)
        doctor = Doctor(
            user_id=user.id,
            doctor_id=f'D-{1000 + user.id}',
            first_name=first_name,
            last_name=last_name,
            specialty='Clinical Psychology',
            is_approved=approved,
            approved_at=NOW if approved else None,
        )
        _db.session.add(doctor)
        _db.session.commit()
        return doctor
    return _make


@pytest.fixture
def make_patient(app):
    def _make(first_name='Sam', last_name='Rivera', email=None, assigned_doctor=None):
        user = _make_user(UserRole.PATIENT, email=email)
        patient = Patient(
            user_id=user.id,
            patient_id=f'P-{1000 + user.id}',
            first_name=first_name,
            last_name=last_name,
            assigned_doctor_id=assigned_doctor.id if assigned_doctor else None,
        )
        _db.session.add(patient)
        _db.session.commit()
        return patient
    return _make


@pytest.fixture
def doctor(make_doctor):
    return make_doctor()


@pytest.fixture
def patient(make_patient):
    return make_patient()


@pytest.fixture
def book(services, now):
    """Factory: book a session for ``patient`` with ``doctor`` at now + offset."""
    def _book(patient, doctor, offset=timedelta(days=1), mode=SessionMode.VIDEO, duration=None, at=None):
        return services.engine.create(
            patient.user_id,
            doctor.id,
            at or now + offset,
            mode,
            duration=duration,
            now=now,
        )
    return _book


@pytest.fixture
def auth_headers(app):
    """Factory: bearer-token headers for a User."""
    def _headers(user):
        token = create_access_token(identity=str(user.id), additional_claims={'role': user.role.value})
        return {'Authorization': f'Bearer {token}'}
    return _headers
