# /aloa/models/alert_models.py
from datetime import datetime
from aloa.extensions import db

ALERT_TYPES = (
    'appointment',
    'medication',
    'checkup',
    'lab_results',
    'prescription_refill',
    'system',
    'emergency',
)

ALERT_PRIORITIES = ('low', 'medium', 'high', 'urgent')

RELATED_MODELS = ('Appointment', 'Prescription', 'HealthRecord')


class Alert(db.Model):
    """An entry in a user's notification inbox."""
    __tablename__ = 'alerts'
    __table_args__ = (
        db.Index('ix_alerts_user_read_created', 'user_id', 'is_read', 'created_at'),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    type = db.Column(db.String(30), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    message = db.Column(db.String(1000), nullable=False)
    priority = db.Column(db.String(10), nullable=False, default='medium', index=True)
    is_read = db.Column(db.Boolean, nullable=False, default=False)
    read_at = db.Column(db.DateTime)
    scheduled_for = db.Column(db.DateTime, index=True)
    expires_at = db.Column(db.DateTime, index=True)
    related_model = db.Column(db.String(30))
    related_id = db.Column(db.Integer)
    action_url = db.Column(db.String(500))
    # "metadata" is reserved on declarative models
    extra = db.Column('metadata', db.JSON)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = db.relationship('User', backref=db.backref('alerts', lazy='dynamic', cascade='all, delete-orphan'))

    @property
    def is_expired(self):
        return bool(self.expires_at and datetime.utcnow() > self.expires_at)

    @property
    def is_due(self):
        return self.scheduled_for is None or self.scheduled_for <= datetime.utcnow()

    @classmethod
    def unexpired(cls, now=None):
        """Filter clause for alerts that have no expiry or expire in the future."""
        now = now or datetime.utcnow()
        return db.or_(cls.expires_at.is_(None), cls.expires_at > now)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'type': self.type,
            'title': self.title,
            'message': self.message,
            'priority': self.priority,
            'is_read': self.is_read,
            'read_at': self.read_at.isoformat() if self.read_at else None,
            'scheduled_for': self.scheduled_for.isoformat() if self.scheduled_for else None,
            'expires_at': self.expires_at.isoformat() if self.expires_at else None,
            'is_expired': self.is_expired,
            'related_model': self.related_model,
            'related_id': self.related_id,
            'action_url': self.action_url,
            'metadata': self.extra,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Alert {self.id}: {self.type} for User {self.user_id}>'
