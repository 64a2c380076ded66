from sqlalchemy import String
from sqlalchemy.types import TypeDecorator
from ..services.encryption import encrypt_value, decrypt_value


class EncryptedString(TypeDecorator):
    """Fernet-encrypted text column; blank values are stored as NULL."""

    impl = String(512)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value in (None, ""):
            return None
        return encrypt_value(str(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return decrypt_value(value)
