"""
Application-level PII encryption using Fernet (AES-128-CBC + HMAC-SHA256).

Client names, birth dates and addresses are stored encrypted. Supports key
rotation via MultiFernet: set FIELD_ENCRYPTION_KEY to a comma-separated list
of keys. The first key encrypts new data, all keys can decrypt.

Usage in models:
    from multinav.encryption import encrypt_field, decrypt_field

    class MyModel(models.Model):
        _name_encrypted = models.BinaryField()

        @property
        def name(self):
            return decrypt_field(self._name_encrypted)

        @name.setter
        def name(self, value):
            self._name_encrypted = encrypt_field(value)
"""
import logging

from cryptography.fernet import Fernet, InvalidToken, MultiFernet
from django.conf import settings
from django.core.checks import Error, register

logger = logging.getLogger(__name__)

_fernet = None


class DecryptionError(Exception):
    """Raised when a field cannot be decrypted.

    Usually a changed key (rotation without re-encryption) or corrupted
    ciphertext. Callers must handle this explicitly.
    """


def _get_fernet():
    """Lazy-initialise the cipher from the configured key(s)."""
    global _fernet
    if _fernet is None:
        key_string = settings.FIELD_ENCRYPTION_KEY
        if not key_string:
            raise ValueError(
                "FIELD_ENCRYPTION_KEY is not set. "
                "Generate one with: python -c \"from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())\""
            )
        keys = [k.strip() for k in key_string.split(",") if k.strip()]
        fernet_instances = [Fernet(k.encode()) for k in keys]
        if len(fernet_instances) == 1:
            _fernet = fernet_instances[0]
        else:
            _fernet = MultiFernet(fernet_instances)
    return _fernet


def encrypt_field(plaintext):
    """Encrypt a string value. Returns bytes for storage in BinaryField."""
    if plaintext is None or plaintext == "":
        return b""
    return _get_fernet().encrypt(plaintext.encode("utf-8"))


def decrypt_field(ciphertext):
    """Decrypt a BinaryField value back to string."""
    if not ciphertext:
        return ""
    if isinstance(ciphertext, memoryview):
        ciphertext = bytes(ciphertext)
    try:
        return _get_fernet().decrypt(ciphertext).decode("utf-8")
    except InvalidToken:
        logger.error("Decryption failed — possible key mismatch or data corruption")
        raise DecryptionError(
            "Decryption failed — possible key mismatch or data corruption"
        )


@register()
def check_encryption_key(app_configs, **kwargs):
    """System check: the configured key must round-trip a sample value."""
    global _fernet
    errors = []
    try:
        _fernet = None
        sample = "multinav-encryption-selftest"
        if decrypt_field(encrypt_field(sample)) != sample:
            errors.append(
                Error(
                    "FIELD_ENCRYPTION_KEY round-trip check failed.",
                    hint="Check that FIELD_ENCRYPTION_KEY is a valid Fernet key.",
                    id="multinav.E001",
                )
            )
    except (ValueError, DecryptionError) as exc:
        errors.append(
            Error(
                f"FIELD_ENCRYPTION_KEY is invalid or missing: {exc}",
                hint=(
                    "Generate a key with: "
                    "python -c \"from cryptography.fernet import Fernet; "
                    "print(Fernet.generate_key().decode())\""
                ),
                id="multinav.E001",
            )
        )
    finally:
        _fernet = None
    return errors
