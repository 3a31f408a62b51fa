# Import every model so create_all and migrations see the full schema.
from aloa.models.user_models import User
from aloa.models.appointment_models import Appointment
from aloa.models.health_record_models import HealthRecord
from aloa.models.prescription_models import Prescription
from aloa.models.alert_models import Alert
from aloa.models.system_models import AuditLog, RevokedToken
