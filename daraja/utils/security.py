"""
Security credential and password generation utilities.
"""

import base64
from datetime import datetime
from typing import Optional

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from ..exceptions import CryptoError

TIMESTAMP_FORMAT = '%Y%m%d%H%M%S'

# PKCS#1 v1.5 padding overhead in bytes
PKCS1_PADDING_OVERHEAD = 11


def load_certificate(path: str) -> bytes:
    """
    Read a public-key certificate file.

    Args:
        path: Filesystem path to the ``.cer`` file

    Returns:
        Raw certificate bytes

    Raises:
        CryptoError: If the file cannot be read
    """
    try:
        with open(path, 'rb') as fh:
            return fh.read()
    except OSError as e:
        raise CryptoError(f"Unable to read certificate at {path}: {str(e)}")


def _load_public_key(certificate: bytes) -> rsa.RSAPublicKey:
    """Extract the RSA public key from PEM/DER certificate bytes or a PEM public key."""
    if not certificate:
        raise CryptoError("Certificate is empty")

    loaders = (
        lambda data: x509.load_pem_x509_certificate(data).public_key(),
        lambda data: x509.load_der_x509_certificate(data).public_key(),
        lambda data: serialization.load_pem_public_key(data),
    )
    public_key = None
    for loader in loaders:
        try:
            public_key = loader(certificate)
            break
        except (ValueError, TypeError, UnsupportedAlgorithm):
            continue

    if public_key is None:
        raise CryptoError("Unable to parse certificate: not a PEM/DER X.509 certificate or public key")

    if not isinstance(public_key, rsa.RSAPublicKey):
        raise CryptoError("Certificate does not carry an RSA public key")

    return public_key


def security_credential(initiator_password: str, certificate: bytes) -> str:
    """
    Encrypt the initiator password with the gateway's public key.

    Uses RSA with PKCS#1 v1.5 padding and base64-encodes the ciphertext.

    Args:
        initiator_password: Plain initiator password
        certificate: Environment certificate bytes

    Returns:
        Base64 security credential

    Raises:
        CryptoError: If the certificate is unusable or encryption fails
    """
    if not initiator_password:
        raise CryptoError("Initiator password is required to generate a security credential")

    public_key = _load_public_key(certificate)
    plaintext = initiator_password.encode('utf-8')

    max_length = public_key.key_size // 8 - PKCS1_PADDING_OVERHEAD
    if len(plaintext) > max_length:
        raise CryptoError(
            f"Initiator password is too long to encrypt: {len(plaintext)} bytes, "
            f"maximum {max_length} for a {public_key.key_size}-bit key"
        )

    try:
        ciphertext = public_key.encrypt(plaintext, padding.PKCS1v15())
    except ValueError as e:
        raise CryptoError(f"Encryption failed: {str(e)}")

    return base64.b64encode(ciphertext).decode('ascii')


def generate_timestamp(now: Optional[datetime] = None) -> str:
    """Timestamp in YYYYMMDDHHmmss form."""
    return (now or datetime.now()).strftime(TIMESTAMP_FORMAT)


def generate_password(shortcode: str, passkey: str, timestamp: str) -> str:
    """
    Generate the STK push password.

    Args:
        shortcode: Business shortcode
        passkey: Lipa na M-Pesa Online passkey
        timestamp: Request timestamp (YYYYMMDDHHmmss)

    Returns:
        base64(shortcode + passkey + timestamp)
    """
    raw = f"{shortcode}{passkey}{timestamp}"
    return base64.b64encode(raw.encode('utf-8')).decode('ascii')
