# /aloa/models/health_record_models.py
from datetime import datetime
from aloa.extensions import db
from aloa.utils.encryption_util import field_encryptor

RECORD_TYPES = (
    'Lab Results',
    'X-Ray',
    'MRI',
    'CT Scan',
    'Prescription',
    'Medical Report',
    'Vaccination Record',
    'Allergy Information',
    'Surgery Report',
    'Other',
)

LAB_VALUE_STATUSES = ('normal', 'high', 'low', 'critical')


class HealthRecord(db.Model):
    """A patient health record: descriptive text, lab values and attached files."""
    __tablename__ = 'health_records'

    id = db.Column(db.Integer, primary_key=True)
    patient_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    doctor_id = db.Column(db.Integer, db.ForeignKey('users.id'), index=True)

    type = db.Column(db.String(50), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    # Fernet token of the description
    description = db.Column(db.Text, nullable=False)
    date = db.Column(db.Date, nullable=False)

    # [{filename, original_name, mimetype, size, path, storage}]
    files = db.Column(db.JSON, nullable=False, default=list)
    # [{parameter, value, unit, reference_range, status}]
    lab_values = db.Column(db.JSON, nullable=False, default=list)
    tags = db.Column(db.JSON, nullable=False, default=list)
    is_private = db.Column(db.Boolean, default=False, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    patient = db.relationship('User', foreign_keys=[patient_id], backref=db.backref('health_records', lazy='dynamic'))
    doctor = db.relationship('User', foreign_keys=[doctor_id])

    def set_description(self, text):
        self.description = field_encryptor.encrypt(text)

    def get_description(self):
        return field_encryptor.decrypt(self.description)

    @property
    def file_count(self):
        return len(self.files or [])

    def get_file(self, index):
        """Returns the file descriptor at index, or None when out of range."""
        files = self.files or []
        if index < 0 or index >= len(files):
            return None
        return files[index]

    def to_dict(self):
        return {
            'id': self.id,
            'patient': self.patient.to_summary() if self.patient else {'id': self.patient_id},
            'doctor': self.doctor.to_summary() if self.doctor else None,
            'type': self.type,
            'title': self.title,
            'description': self.get_description(),
            'date': self.date.isoformat(),
            # Storage paths stay on the server
            'files': [
                {
                    'index': index,
                    'original_name': f['original_name'],
                    'mimetype': f['mimetype'],
                    'size': f['size'],
                }
                for index, f in enumerate(self.files or [])
            ],
            'file_count': self.file_count,
            'lab_values': self.lab_values or [],
            'tags': self.tags or [],
            'is_private': self.is_private,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f'<HealthRecord {self.id}: {self.type} for Patient {self.patient_id}>'
