# /aloa/models/prescription_models.py
from datetime import datetime
from aloa.extensions import db

MEDICATION_FREQUENCIES = (
    'Once daily',
    'Twice daily',
    'Three times daily',
    'Four times daily',
    'Every 4 hours',
    'Every 6 hours',
    'Every 8 hours',
    'As needed',
)

PRESCRIPTION_STATUSES = ('active', 'completed', 'cancelled')

PRESCRIPTION_TRANSITIONS = {
    'active': {'completed', 'cancelled'},
    'completed': set(),
    'cancelled': set(),
}

MAX_REFILLS = 12


class Prescription(db.Model):
    """Medications prescribed by a doctor to a patient."""
    __tablename__ = 'prescriptions'
    __table_args__ = (
        db.CheckConstraint('refills_used <= refills_allowed', name='ck_prescriptions_refills_within_allowance'),
        db.CheckConstraint('refills_allowed >= 0 AND refills_allowed <= 12', name='ck_prescriptions_refills_allowed_range'),
    )

    id = db.Column(db.Integer, primary_key=True)
    patient_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    doctor_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    appointment_id = db.Column(db.Integer, db.ForeignKey('appointments.id'))

    # [{name, dosage, frequency, duration, instructions}]
    medications = db.Column(db.JSON, nullable=False)
    diagnosis = db.Column(db.String(1000))
    notes = db.Column(db.String(1000))
    status = db.Column(db.String(20), nullable=False, default='active', index=True)
    refills_allowed = db.Column(db.Integer, nullable=False, default=0)
    refills_used = db.Column(db.Integer, nullable=False, default=0)
    expiry_date = db.Column(db.DateTime, index=True)
    is_urgent = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    patient = db.relationship('User', foreign_keys=[patient_id], backref=db.backref('prescriptions', lazy='dynamic'))
    doctor = db.relationship('User', foreign_keys=[doctor_id], backref=db.backref('issued_prescriptions', lazy='dynamic'))
    appointment = db.relationship('Appointment', backref='prescriptions')

    @property
    def refills_remaining(self):
        return max(0, (self.refills_allowed or 0) - (self.refills_used or 0))

    @property
    def is_expired(self):
        return bool(self.expiry_date and datetime.utcnow() > self.expiry_date)

    def to_dict(self):
        return {
            'id': self.id,
            'patient': self.patient.to_summary() if self.patient else {'id': self.patient_id},
            'doctor': self.doctor.to_summary() if self.doctor else {'id': self.doctor_id},
            'appointment': self.appointment.to_brief() if self.appointment else None,
            'medications': self.medications,
            'diagnosis': self.diagnosis,
            'notes': self.notes,
            'status': self.status,
            'refills_allowed': self.refills_allowed,
            'refills_used': self.refills_used,
            'refills_remaining': self.refills_remaining,
            'expiry_date': self.expiry_date.isoformat() if self.expiry_date else None,
            'is_expired': self.is_expired,
            'is_urgent': self.is_urgent,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f'<Prescription {self.id}: {self.status} for Patient {self.patient_id}>'
