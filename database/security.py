"""
Data protection helpers for candidate and integration records.

This module provides:
- Column metadata markers for PII and secret classification
- Masking helpers used before values reach logs or exports
- AES-256-GCM encryption for third-party credentials stored at rest
"""

from enum import Enum as PyEnum
from typing import Any, Dict, List, Optional, TypeVar
from base64 import urlsafe_b64decode, urlsafe_b64encode
from secrets import token_bytes
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM


# =======================================
# Classification Enums
# =======================================


class DataSensitivity(str, PyEnum):
    """Data sensitivity classification."""

    PUBLIC = "public"
    INTERNAL = "internal"
    CONFIDENTIAL = "confidential"
    RESTRICTED = "restricted"  # credentials, secrets


class EncryptionType(str, PyEnum):
    """Encryption requirements for data."""

    NONE = "none"
    AT_REST = "at_rest"


class GDPRDataCategory(str, PyEnum):
    """Categories of personal data under GDPR."""

    IDENTITY = "identity"  # Name, email
    CONTACT = "contact"  # Location
    BEHAVIORAL = "behavioral"  # Tab switches, session analytics
    PROFESSIONAL = "professional"  # Work history, skills


# =======================================
# Column Security Metadata
# =======================================


def compliance_column(
    sensitivity: DataSensitivity = DataSensitivity.CONFIDENTIAL,
    encryption: EncryptionType = EncryptionType.NONE,
    pii: bool = False,
    gdpr_category: Optional[GDPRDataCategory] = None,
    mask_in_logs: bool = True,
    **kwargs,
) -> Dict[str, Any]:
    """
    Mark a column with data protection metadata.

    The returned dict is meant for the ``info`` argument of ``mapped_column``
    and is read back by :class:`ComplianceMixin`.

    Usage:
        email: Mapped[str | None] = mapped_column(
            String(255),
            info=compliance_column(
                pii=True,
                gdpr_category=GDPRDataCategory.IDENTITY,
            ),
        )
    """
    return {
        "sensitivity": sensitivity.value,
        "encryption": encryption.value,
        "mask_in_logs": mask_in_logs,
        "pii": pii,
        "gdpr_category": gdpr_category.value if gdpr_category else None,
        **kwargs,
    }


# =======================================
# Data Masking Utilities
# =======================================


def mask_sensitive_data(value: str, visible_chars: int = 4) -> str:
    """
    Masks sensitive data by showing only the last `visible_chars` characters.

    Args:
        value (str): The sensitive data to mask.
        visible_chars (int): Number of characters to leave visible at the end.

    Returns:
        str: The masked data.
    """
    if not value or len(value) <= visible_chars:
        return "*" * len(value or "")
    return "*" * (len(value) - visible_chars) + value[-visible_chars:]


def mask_email(email: str) -> str:
    """
    Masks an email address by showing only the first character of the local part
    and the domain.

    Args:
        email (str): The email address to mask.

    Returns:
        str: The masked email address.
    """
    if not email or email.count("@") != 1:
        return mask_sensitive_data(email)
    local_part, domain = email.split("@")
    if len(local_part) <= 1:
        masked_local = "*"
    else:
        masked_local = local_part[0] + "*" * (len(local_part) - 1)
    return f"{masked_local}@{domain}"


# =======================================
# Compliance Mixin
# =======================================
CT = TypeVar("CT", bound="ComplianceMixin")


class ComplianceMixin:
    """
    Mixin for models carrying PII or secrets.

    Reads the ``compliance_column`` markers to list protected fields and to
    produce log-safe dictionaries.
    """

    @classmethod
    def get_pii_fields(cls: CT) -> List[str]:
        """
        Returns a list of PII fields in the model.

        Returns:
            List[str]: List of PII field names.
        """
        return [
            column.name
            for column in cls.__table__.columns
            if column.info.get("pii")
        ]

    @classmethod
    def get_encrypted_fields(cls: CT) -> List[str]:
        """
        Returns the columns stored encrypted at rest.

        Returns:
            List[str]: List of encrypted field names.
        """
        return [
            column.name
            for column in cls.__table__.columns
            if column.info.get("encryption", EncryptionType.NONE.value)
            != EncryptionType.NONE.value
        ]

    def to_dict_masked(self: CT, mask_sensitive: bool = True) -> Dict[str, Any]:
        """
        Converts model to dictionary, masking sensitive fields if specified.

        Args:
            mask_sensitive (bool): Whether to mask sensitive fields.
        Returns:
            Dict[str, Any]: The model data as a dictionary.
        """
        encrypted = set(self.get_encrypted_fields())
        pii = set(self.get_pii_fields())
        result_data = {}
        for column in self.__table__.columns:
            value = getattr(self, column.name)
            masked = column.name in pii or column.info.get("mask_in_logs")
            if mask_sensitive and masked and value:
                # Secrets are hidden whole; even ciphertext never reaches a log
                if (
                    column.name in encrypted
                    or column.info.get("sensitivity") == DataSensitivity.RESTRICTED.value
                ):
                    value = "*" * 8
                elif "@" in str(value):
                    value = mask_email(str(value))
                else:
                    value = mask_sensitive_data(str(value))
            result_data[column.name] = value
        return result_data


# =======================================
# Cryptographic Utilities
# =======================================
class CryptoUtils:
    """
    Utility class for encrypting credentials at rest with AES-256-GCM.
    """

    _NONCE_LENGTH = 12  # AES-GCM recommended nonce size

    @staticmethod
    def _normalize_key(key: bytes | str | None) -> bytes:
        """
        Accept raw 32-byte keys or their URL-safe base64 encoding and return raw bytes.
        """
        if key is None:
            raise ValueError("Encryption key must be provided")

        if isinstance(key, bytes):
            key_bytes_candidate = key
        else:
            key_bytes_candidate = key.encode("utf-8")

        if len(key_bytes_candidate) == 32:
            return key_bytes_candidate

        try:
            decoded = urlsafe_b64decode(key_bytes_candidate)
        except ValueError:
            decoded = None

        if decoded and len(decoded) == 32:
            return decoded

        raise ValueError(
            "Encryption key must be 32 bytes (AES-256) or its URL-safe base64 encoding"
        )

    @staticmethod
    def encrypt(value: str | None, key: bytes | str | None = None) -> str | None:
        """
        Encrypts a value using AES-256-GCM.

        Args:
            value: Plain text value to encrypt
            key: 32-byte AES key (raw bytes or URL-safe base64 encoded)

        Returns:
            URL-safe base64 encoded ciphertext containing nonce + ciphertext + tag
        """
        if value is None:
            return None
        key_bytes = CryptoUtils._normalize_key(key)
        aesgcm = AESGCM(key_bytes)
        nonce = token_bytes(CryptoUtils._NONCE_LENGTH)
        ciphertext = aesgcm.encrypt(nonce, value.encode("utf-8"), None)
        return urlsafe_b64encode(nonce + ciphertext).decode("utf-8")

    @staticmethod
    def decrypt(token: str | None, key: bytes | str | None = None) -> str | None:
        """
        Decrypts an AES-256-GCM encrypted value.

        Args:
            token: URL-safe base64 string containing nonce + ciphertext + tag
            key: 32-byte AES key (raw bytes or URL-safe base64 encoded)

        Returns:
            Decrypted plaintext string or None
        """
        if token is None:
            return None
        key_bytes = CryptoUtils._normalize_key(key)
        try:
            raw = urlsafe_b64decode(token.encode("utf-8"))
            if len(raw) <= CryptoUtils._NONCE_LENGTH:
                raise ValueError("Invalid encrypted payload")
            nonce = raw[: CryptoUtils._NONCE_LENGTH]
            ciphertext = raw[CryptoUtils._NONCE_LENGTH :]
            decrypted = AESGCM(key_bytes).decrypt(nonce, ciphertext, None)
            return decrypted.decode("utf-8")
        except (InvalidTag, ValueError, TypeError) as e:
            raise ValueError("Invalid or corrupted encrypted value") from e

    @staticmethod
    def generate_key() -> bytes:
        """
        Generates a new AES-256-GCM key.

        Returns:
            bytes: The generated key, URL-safe base64 encoded.
        """
        return urlsafe_b64encode(AESGCM.generate_key(bit_length=256))
