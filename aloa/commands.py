# /aloa/commands.py
from datetime import datetime, timedelta
import click
from flask.cli import with_appcontext
from aloa.extensions import db
from aloa.models.user_models import User
from aloa.models.appointment_models import Appointment
from aloa.models.health_record_models import HealthRecord
from aloa.models.prescription_models import Prescription
from aloa.models.alert_models import Alert
from aloa.services.prescription_service import apply_prescription_defaults

DEMO_PASSWORD = 'DemoPass123'


@click.command('init-db')
@with_appcontext
def init_db_command():
    """Create all database tables."""
    db.create_all()
    click.echo("Database initialized successfully!")


@click.command('create-admin')
@click.option('--name', required=True, help='Full name of the administrator.')
@click.option('--email', required=True, help='Login email.')
@click.option('--password', required=True, prompt=True, hide_input=True, confirmation_prompt=True)
@with_appcontext
def create_admin_command(name, email, password):
    """Create an administrator account."""
    if User.find_by_email(email):
        raise click.ClickException(f"A user with email {email} already exists")

    admin = User(name=name, email=User.normalize_email(email), role='admin')
    try:
        admin.set_password(password)
    except ValueError as e:
        raise click.ClickException(str(e))

    db.session.add(admin)
    db.session.commit()
    click.echo(f"Admin user {admin.email} created (id {admin.id})")


def _seed_users():
    users_data = [
        {'name': 'John Doe', 'email': 'patient@demo.com', 'role': 'patient', 'phone': '+1234567890'},
        {'name': 'Dr. Sarah Wilson', 'email': 'doctor@demo.com', 'role': 'doctor',
         'specialization': 'Cardiology', 'phone': '+1234567891'},
        {'name': 'Dr. Michael Chen', 'email': 'doctor2@demo.com', 'role': 'doctor',
         'specialization': 'Neurology', 'phone': '+1234567892'},
        {'name': 'Admin User', 'email': 'admin@demo.com', 'role': 'admin', 'phone': '+1234567893'},
        {'name': 'Jane Smith', 'email': 'patient2@demo.com', 'role': 'patient', 'phone': '+1234567894'},
    ]
    users = []
    for data in users_data:
        user = User(**data)
        user.set_password(DEMO_PASSWORD)
        db.session.add(user)
        users.append(user)
    db.session.commit()
    return users


def _seed_appointments(patients, doctors):
    today = datetime.utcnow().date()
    appointments = [
        Appointment(patient_id=patients[0].id, doctor_id=doctors[0].id, date=today + timedelta(days=1),
                    time='10:00', type='General Consultation', status='scheduled',
                    notes='Regular checkup appointment',
                    symptoms='Mild chest pain, occasional shortness of breath'),
        Appointment(patient_id=patients[0].id, doctor_id=doctors[1].id, date=today + timedelta(days=7),
                    time='14:30', type='Specialist Consultation', status='scheduled',
                    notes='Neurological consultation for headaches'),
        Appointment(patient_id=patients[1].id, doctor_id=doctors[0].id, date=today - timedelta(days=7),
                    time='09:00', type='Follow-up', status='completed',
                    diagnosis='Hypertension under control',
                    treatment='Continue current medication, lifestyle modifications'),
        Appointment(patient_id=patients[0].id, doctor_id=doctors[0].id, date=today - timedelta(days=14),
                    time='11:00', type='Routine Checkup', status='completed',
                    diagnosis='Overall health good, minor concerns addressed',
                    treatment='Recommended annual blood work'),
    ]
    db.session.add_all(appointments)
    db.session.commit()
    return appointments


def _seed_health_records(patients, doctors):
    today = datetime.utcnow().date()
    records_data = [
        {'patient_id': patients[0].id, 'doctor_id': doctors[0].id, 'type': 'Lab Results',
         'title': 'Complete Blood Count (CBC)',
         'description': 'Routine blood work showing normal values across all parameters.',
         'date': today - timedelta(days=5), 'tags': ['blood work', 'routine', 'normal'],
         'lab_values': [
             {'parameter': 'Hemoglobin', 'value': '14.2', 'unit': 'g/dL',
              'reference_range': '12.0-15.5', 'status': 'normal'},
             {'parameter': 'White Blood Cells', 'value': '6.8', 'unit': '10³/μL',
              'reference_range': '4.5-11.0', 'status': 'normal'},
         ]},
        {'patient_id': patients[0].id, 'doctor_id': doctors[1].id, 'type': 'MRI',
         'title': 'Brain MRI Scan',
         'description': 'MRI scan of the brain to investigate recurring headaches. No abnormalities detected.',
         'date': today - timedelta(days=10), 'tags': ['brain', 'headaches', 'normal']},
        {'patient_id': patients[1].id, 'doctor_id': doctors[0].id, 'type': 'X-Ray',
         'title': 'Chest X-Ray',
         'description': 'Chest X-ray showing clear lungs with no signs of infection. Heart size normal.',
         'date': today - timedelta(days=3), 'tags': ['chest', 'lungs', 'clear']},
        {'patient_id': patients[0].id, 'type': 'Vaccination Record',
         'title': 'COVID-19 Vaccination',
         'description': 'Second dose of COVID-19 vaccine administered. No adverse reactions reported.',
         'date': today - timedelta(days=30), 'tags': ['vaccination', 'covid-19', 'immunization']},
    ]
    for data in records_data:
        description = data.pop('description')
        record = HealthRecord(files=[], lab_values=data.pop('lab_values', []), **data)
        record.set_description(description)
        db.session.add(record)
    db.session.commit()


def _seed_prescriptions(patients, doctors, appointments):
    completed = next(a for a in appointments if a.status == 'completed' and a.patient_id == patients[0].id)
    prescriptions = [
        Prescription(patient_id=patients[0].id, doctor_id=doctors[0].id, appointment_id=completed.id,
                     medications=[
                         {'name': 'Lisinopril', 'dosage': '10mg', 'frequency': 'Once daily',
                          'duration': '30 days', 'instructions': 'Take in the morning with food'},
                         {'name': 'Aspirin', 'dosage': '81mg', 'frequency': 'Once daily',
                          'duration': '30 days', 'instructions': 'Take with food to prevent stomach upset'},
                     ],
                     diagnosis='Hypertension',
                     notes='Monitor blood pressure regularly. Return if experiencing any side effects.',
                     status='active', refills_allowed=3, refills_used=0),
        Prescription(patient_id=patients[0].id, doctor_id=doctors[1].id,
                     medications=[
                         {'name': 'Sumatriptan', 'dosage': '50mg', 'frequency': 'As needed',
                          'duration': '30 days',
                          'instructions': 'Take at onset of migraine symptoms. Maximum 2 doses per day.'},
                     ],
                     diagnosis='Migraine headaches',
                     notes='Use only when experiencing migraine symptoms.',
                     status='active', refills_allowed=2, refills_used=1),
        Prescription(patient_id=patients[1].id, doctor_id=doctors[0].id,
                     medications=[
                         {'name': 'Amoxicillin', 'dosage': '500mg', 'frequency': 'Three times daily',
                          'duration': '7 days',
                          'instructions': 'Take with food. Complete entire course even if feeling better.'},
                     ],
                     diagnosis='Bacterial infection',
                     notes='Complete the full course of antibiotics. Contact if symptoms worsen.',
                     status='completed', refills_allowed=0, refills_used=0),
    ]
    for prescription in prescriptions:
        apply_prescription_defaults(prescription)
    db.session.add_all(prescriptions)
    db.session.commit()


def _seed_alerts(patients):
    now = datetime.utcnow()
    alerts = [
        Alert(user_id=patients[0].id, type='appointment', title='Upcoming Appointment Reminder',
              message='You have an appointment with Dr. Sarah Wilson tomorrow at 10:00 AM.',
              priority='medium', scheduled_for=now + timedelta(hours=12)),
        Alert(user_id=patients[0].id, type='medication', title='Medication Refill Due',
              message='Your Lisinopril prescription is running low. You have 2 refills remaining.',
              priority='high'),
        Alert(user_id=patients[0].id, type='checkup', title='Annual Checkup Due',
              message="It's time for your annual health checkup. Please schedule an appointment.",
              priority='low', is_read=True, read_at=now - timedelta(days=2)),
        Alert(user_id=patients[1].id, type='lab_results', title='Lab Results Available',
              message='Your recent blood work results are now available for review.',
              priority='medium'),
    ]
    db.session.add_all(alerts)
    db.session.commit()


@click.command('seed-demo')
@with_appcontext
def seed_demo_command():
    """Drop all data and load the demo accounts and records."""
    db.drop_all()
    db.create_all()

    users = _seed_users()
    patients = [u for u in users if u.role == 'patient']
    doctors = [u for u in users if u.role == 'doctor']

    appointments = _seed_appointments(patients, doctors)
    _seed_health_records(patients, doctors)
    _seed_prescriptions(patients, doctors, appointments)
    _seed_alerts(patients)

    click.echo("Database seeded successfully!")
    click.echo("Demo accounts (password: %s):" % DEMO_PASSWORD)
    for user in users:
        click.echo(f"  {user.role:<8} {user.email}")


def register_commands(app):
    app.cli.add_command(init_db_command)
    app.cli.add_command(create_admin_command)
    app.cli.add_command(seed_demo_command)
