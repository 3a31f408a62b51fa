import shutil
from datetime import datetime, timedelta

import pytest
from flask_jwt_extended import create_access_token

from aloa import create_app
from aloa.extensions import db
from aloa.models.user_models import User

PASSWORD = 'Secret123'


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()
    shutil.rmtree(app.config['UPLOAD_FOLDER'], ignore_errors=True)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    counter = {'n': 0}

    def _make_user(role='patient', **fields):
        counter['n'] += 1
        user = User(
            name=fields.pop('name', f'{role.title()} {counter["n"]}'),
            email=fields.pop('email', f'{role}{counter["n"]}@example.com'),
            role=role,
            specialization=fields.pop('specialization', 'Cardiology' if role == 'doctor' else None),
            **fields
        )
        user.set_password(PASSWORD)
        db.session.add(user)
        db.session.commit()
        return user

    return _make_user


@pytest.fixture
def patient(make_user):
    return make_user('patient')


@pytest.fixture
def doctor(make_user):
    return make_user('doctor')


@pytest.fixture
def admin(make_user):
    return make_user('admin')


@pytest.fixture
def auth_headers(app):
    def _auth_headers(user):
        token = create_access_token(identity=str(user.id), additional_claims={'role': user.role})
        return {'Authorization': f'Bearer {token}'}

    return _auth_headers


@pytest.fixture
def future_day():
    return datetime.utcnow().date() + timedelta(days=3)


@pytest.fixture
def book(client, auth_headers, future_day):
    """Books an appointment as the patient and returns the response."""
    def _book(patient, doctor, day=None, time='10:00', **extra):
        payload = {
            'doctor': doctor.id,
            'date': (day or future_day).isoformat(),
            'time': time,
            'type': 'General Consultation',
        }
        payload.update(extra)
        return client.post('/api/appointments', json=payload, headers=auth_headers(patient))

    return _book
