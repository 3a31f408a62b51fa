# /aloa/models/user_models.py
from datetime import datetime, timedelta
from aloa.extensions import db, bcrypt

ROLES = ('patient', 'doctor', 'admin')
MAX_FAILED_LOGINS = 5
LOCKOUT_PERIOD = timedelta(minutes=30)


class User(db.Model):
    """Account for a patient, doctor or administrator."""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    # The role is chosen at creation and never changed afterwards.
    role = db.Column(db.String(20), nullable=False, index=True)
    specialization = db.Column(db.String(100))
    phone = db.Column(db.String(30))
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    last_login = db.Column(db.DateTime)
    failed_login_attempts = db.Column(db.Integer, default=0, nullable=False)
    account_locked_until = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    audit_logs = db.relationship('AuditLog', backref='user', lazy='dynamic')

    @staticmethod
    def normalize_email(email: str) -> str:
        return (email or '').strip().lower()

    @classmethod
    def find_by_email(cls, email):
        return cls.query.filter_by(email=cls.normalize_email(email)).first()

    @classmethod
    def find_active(cls, user_id, role):
        """Returns the active user with this id and role, or None."""
        if user_id is None:
            return None
        return cls.query.filter_by(id=user_id, role=role, is_active=True).first()

    def set_password(self, password: str) -> None:
        """Hashes and sets the user's password, enforcing the password policy."""
        if not self._validate_password_strength(password):
            raise ValueError("Password must be at least 8 characters and contain a letter and a digit")
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    @property
    def is_locked(self) -> bool:
        return bool(self.account_locked_until and datetime.utcnow() < self.account_locked_until)

    def check_password(self, password: str) -> bool:
        """Checks a password and updates the failed-login counter.

        The caller commits the session.
        """
        if self.is_locked:
            return False
        if self.account_locked_until:
            # Lock period is over
            self.account_locked_until = None
            self.failed_login_attempts = 0

        is_valid = bcrypt.check_password_hash(self.password_hash, password)

        if not is_valid:
            self.failed_login_attempts = (self.failed_login_attempts or 0) + 1
            if self.failed_login_attempts >= MAX_FAILED_LOGINS:
                self.account_locked_until = datetime.utcnow() + LOCKOUT_PERIOD
        else:
            self.failed_login_attempts = 0
            self.last_login = datetime.utcnow()
        return is_valid

    def to_summary(self):
        """Short form embedded in other resources."""
        data = {'id': self.id, 'name': self.name, 'email': self.email}
        if self.role == 'doctor':
            data['specialization'] = self.specialization
        return data

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'role': self.role,
            'specialization': self.specialization,
            'phone': self.phone,
            'is_active': self.is_active,
            'last_login': self.last_login.isoformat() if self.last_login else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    @staticmethod
    def _validate_password_strength(password: str) -> bool:
        return bool(password) and (len(password) >= 8 and
                                   any(c.isalpha() for c in password) and
                                   any(c.isdigit() for c in password))

    def __repr__(self):
        return f'<User {self.id}: {self.role}>'
