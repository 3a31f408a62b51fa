# /aloa/models/appointment_models.py
from datetime import datetime, time as dt_time
from aloa.extensions import db

APPOINTMENT_TYPES = (
    'General Consultation',
    'Follow-up',
    'Specialist Consultation',
    'Emergency',
    'Routine Checkup',
    'Lab Results Review',
)

APPOINTMENT_STATUSES = ('scheduled', 'completed', 'cancelled', 'no-show')

# Statuses an appointment can move to from each status. Left states are final.
APPOINTMENT_TRANSITIONS = {
    'scheduled': {'completed', 'cancelled', 'no-show'},
    'completed': set(),
    'cancelled': set(),
    'no-show': set(),
}


class Appointment(db.Model):
    """A booked slot between a patient and a doctor."""
    __tablename__ = 'appointments'
    __table_args__ = (
        # At most one scheduled appointment per doctor and slot.
        db.Index(
            'uq_appointments_doctor_slot_scheduled',
            'doctor_id', 'date', 'time',
            unique=True,
            postgresql_where=db.text("status = 'scheduled'"),
            sqlite_where=db.text("status = 'scheduled'"),
        ),
        db.Index('ix_appointments_patient_date', 'patient_id', 'date'),
        db.Index('ix_appointments_doctor_date', 'doctor_id', 'date'),
    )

    id = db.Column(db.Integer, primary_key=True)

    patient_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    doctor_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)

    date = db.Column(db.Date, nullable=False)
    time = db.Column(db.String(5), nullable=False)  # HH:MM, 24h
    type = db.Column(db.String(50), nullable=False)
    status = db.Column(db.String(20), nullable=False, default='scheduled', index=True)

    notes = db.Column(db.String(500))
    symptoms = db.Column(db.String(1000))
    diagnosis = db.Column(db.String(1000))
    treatment = db.Column(db.String(1000))

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    patient = db.relationship('User', foreign_keys=[patient_id], backref=db.backref('patient_appointments', lazy='dynamic'))
    doctor = db.relationship('User', foreign_keys=[doctor_id], backref=db.backref('doctor_appointments', lazy='dynamic'))

    @property
    def scheduled_at(self) -> datetime:
        """The appointment date combined with its HH:MM time."""
        hours, minutes = (int(part) for part in self.time.split(':'))
        return datetime.combine(self.date, dt_time(hours, minutes))

    def to_dict(self):
        return {
            'id': self.id,
            'patient': self.patient.to_summary() if self.patient else {'id': self.patient_id},
            'doctor': self.doctor.to_summary() if self.doctor else {'id': self.doctor_id},
            'date': self.date.isoformat(),
            'time': self.time,
            'datetime': self.scheduled_at.isoformat(),
            'type': self.type,
            'status': self.status,
            'notes': self.notes,
            'symptoms': self.symptoms,
            'diagnosis': self.diagnosis,
            'treatment': self.treatment,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def to_brief(self):
        return {'id': self.id, 'date': self.date.isoformat(), 'time': self.time, 'type': self.type}

    def __repr__(self):
        return f'<Appointment {self.id}: doctor {self.doctor_id} {self.date} {self.time} {self.status}>'
