"""Certificate inspection and verification utilities."""

from datetime import datetime, timezone
from typing import Optional
import ipaddress
import logging

from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.x509.oid import NameOID

from .errors import CertificateVerificationError

logger = logging.getLogger(__name__)


class CertificateVerifier:
    """Utility class for verifying self-signed certificates."""

    @staticmethod
    def verify_self_signature(cert: x509.Certificate) -> bool:
        """
        Verify that cert is signed by its own key.

        Args:
            cert: Certificate to verify

        Returns:
            True if the signature is valid

        Raises:
            CertificateVerificationError: If signature verification fails
        """
        if cert.issuer != cert.subject:
            raise CertificateVerificationError(
                f"Not self-issued: {cert.subject.rfc4514_string()} "
                f"issued by {cert.issuer.rfc4514_string()}"
            )

        try:
            cert.public_key().verify(
                cert.signature,
                cert.tbs_certificate_bytes,
                cert.signature_algorithm_parameters
            )
        except InvalidSignature:
            raise CertificateVerificationError(
                f"Invalid self-signature: {cert.subject.rfc4514_string()}"
            )

        return True

    @staticmethod
    def verify_validity(cert: x509.Certificate, at: Optional[datetime] = None) -> bool:
        """
        Verify certificate is within its validity period.

        Args:
            cert: Certificate to verify
            at: Point in time to check (default: now)

        Raises:
            CertificateVerificationError: If certificate is expired or not yet valid
        """
        now = at or datetime.now(timezone.utc)

        if now < cert.not_valid_before_utc:
            raise CertificateVerificationError(
                f"Certificate not yet valid: {cert.subject.rfc4514_string()} "
                f"(valid from {cert.not_valid_before_utc})"
            )

        if now > cert.not_valid_after_utc:
            raise CertificateVerificationError(
                f"Certificate expired: {cert.subject.rfc4514_string()} "
                f"(expired on {cert.not_valid_after_utc})"
            )

        return True

    @staticmethod
    def verify_hostname(cert: x509.Certificate, hostname: str) -> bool:
        """
        Check that cert is valid for hostname.

        Only subject alternative names are consulted; the common name is never
        used as a fallback. DNS patterns may carry a single wildcard as their
        entire left-most label. IP literals are matched against IP SANs.

        Args:
            cert: Leaf certificate
            hostname: DNS name or IP literal the peer was reached by

        Returns:
            True if the certificate covers the hostname

        Raises:
            CertificateVerificationError: If it does not
        """
        host = hostname.strip()
        if host.startswith("[") and host.endswith("]"):
            host = host[1:-1]

        try:
            san = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName).value
        except x509.ExtensionNotFound:
            raise CertificateVerificationError(
                f"Certificate has no subject alternative names, cannot verify {hostname}"
            )

        try:
            ip = ipaddress.ip_address(host)
        except ValueError:
            ip = None

        if ip is not None:
            if ip in san.get_values_for_type(x509.IPAddress):
                return True
            raise CertificateVerificationError(
                f"Certificate is not valid for IP address {hostname}"
            )

        host = host.rstrip(".").lower()
        dns_names = san.get_values_for_type(x509.DNSName)
        for pattern in dns_names:
            if _match_hostname(pattern, host):
                return True

        raise CertificateVerificationError(
            f"Certificate is valid for {', '.join(dns_names) or 'no DNS names'}, not {hostname}"
        )

    @staticmethod
    def describe_certificate(cert: x509.Certificate) -> dict:
        """
        Extract subject, validity and identity details from a certificate.

        Returns:
            Dictionary containing certificate information
        """
        try:
            dns_names = cert.extensions.get_extension_for_class(
                x509.SubjectAlternativeName
            ).value.get_values_for_type(x509.DNSName)
        except x509.ExtensionNotFound:
            dns_names = []

        return {
            "subject": {
                "common_name": _name_value(cert.subject, NameOID.COMMON_NAME),
                "organization": _name_value(cert.subject, NameOID.ORGANIZATION_NAME),
            },
            "issuer": {
                "common_name": _name_value(cert.issuer, NameOID.COMMON_NAME),
                "organization": _name_value(cert.issuer, NameOID.ORGANIZATION_NAME),
            },
            "serial_number": cert.serial_number,
            "not_valid_before": cert.not_valid_before_utc.isoformat(),
            "not_valid_after": cert.not_valid_after_utc.isoformat(),
            "dns_names": dns_names,
            "fingerprint_sha256": CertificateVerifier.get_certificate_fingerprint(cert),
        }

    @staticmethod
    def get_certificate_fingerprint(cert: x509.Certificate, algorithm: str = "sha256") -> str:
        """
        Get certificate fingerprint.

        Args:
            cert: Certificate
            algorithm: Hash algorithm (sha256, sha1)

        Returns:
            Hex-encoded fingerprint
        """
        if algorithm == "sha256":
            digest = cert.fingerprint(hashes.SHA256())
        elif algorithm == "sha1":
            digest = cert.fingerprint(hashes.SHA1())
        else:
            raise ValueError(f"Unsupported algorithm: {algorithm}")

        return digest.hex()


def _name_value(name: x509.Name, oid: x509.ObjectIdentifier) -> Optional[str]:
    attrs = name.get_attributes_for_oid(oid)
    return attrs[0].value if attrs else None


def _match_hostname(pattern: str, host: str) -> bool:
    pattern = pattern.rstrip(".").lower()
    if not pattern or not host:
        return False
    if pattern == host:
        return True

    if not pattern.startswith("*."):
        return False

    pattern_labels = pattern.split(".")
    host_labels = host.split(".")
    if len(pattern_labels) != len(host_labels) or not host_labels[0]:
        return False
    return pattern_labels[1:] == host_labels[1:]
