"""In-memory certificate format conversion utilities."""

import logging
from typing import TYPE_CHECKING, Optional

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.serialization import pkcs12

if TYPE_CHECKING:
    from .credential import TLSCertificate

logger = logging.getLogger(__name__)


class CertificateFormatConverter:
    """Convert a generated credential between encodings without touching disk."""

    @staticmethod
    def pem_to_der(pem_data: bytes) -> bytes:
        """
        Convert PEM certificate to DER format.

        Args:
            pem_data: PEM-encoded certificate bytes

        Returns:
            DER-encoded certificate bytes
        """
        cert = x509.load_pem_x509_certificate(pem_data)
        return cert.public_bytes(serialization.Encoding.DER)

    @staticmethod
    def to_pkcs12(
        credential: "TLSCertificate",
        password: Optional[bytes] = None,
        friendly_name: Optional[bytes] = None
    ) -> bytes:
        """
        Package a credential as PKCS12 (.p12/.pfx) bytes.

        Args:
            credential: Certificate and key to package
            password: Optional password to encrypt the PKCS12 data
            friendly_name: Optional friendly name for the certificate

        Returns:
            PKCS12-encoded data bytes
        """
        logger.debug(f"Packaging credential {credential.serial_number} as PKCS12")
        return pkcs12.serialize_key_and_certificates(
            name=friendly_name,
            key=credential.private_key,
            cert=credential.leaf,
            cas=None,
            encryption_algorithm=serialization.BestAvailableEncryption(password) if password else serialization.NoEncryption()
        )

    @staticmethod
    def create_bundle(credential: "TLSCertificate") -> bytes:
        """Concatenate certificate and private key PEM blocks into one bundle."""
        return credential.certificate_pem + credential.private_key_pem
