# /aloa/utils/encryption_util.py
from cryptography.fernet import Fernet, InvalidToken
from flask import current_app


class FieldEncryptor:
    """
    Encrypts clinical free text (health record descriptions) before it is stored.
    Bound to the Flask app so the key comes from EMR_ENCRYPTION_KEY.
    """
    def __init__(self, app=None):
        self.fernet = None
        if app:
            self.init_app(app)

    def init_app(self, app):
        key = app.config.get('EMR_ENCRYPTION_KEY')
        if not key:
            raise ValueError("EMR_ENCRYPTION_KEY not set in the Flask application config.")
        self.fernet = Fernet(key.encode() if isinstance(key, str) else key)

    def _require_fernet(self):
        if self.fernet is None:
            raise RuntimeError("FieldEncryptor has not been initialized with an app.")
        return self.fernet

    def encrypt(self, value):
        """Returns the Fernet token for value; None stays None."""
        if value is None:
            return None
        fernet = self._require_fernet()
        return fernet.encrypt(str(value).encode('utf-8')).decode('utf-8')

    def decrypt(self, token):
        """Returns the plaintext for token, or None when it cannot be decrypted."""
        if not token:
            return None
        fernet = self._require_fernet()
        try:
            return fernet.decrypt(token.encode('utf-8')).decode('utf-8')
        except InvalidToken:
            current_app.logger.error("Decryption failed: invalid token for stored field.")
            return None


field_encryptor = FieldEncryptor()
