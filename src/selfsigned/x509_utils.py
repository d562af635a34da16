"""X.509 key, certificate and PEM primitives for self-signed credentials."""

from datetime import datetime, timezone
from typing import Tuple
import logging
import secrets

from cryptography import x509
from cryptography.x509.oid import NameOID, ExtendedKeyUsageOID
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from asn1crypto import x509 as asn1_x509

from .errors import KeyPairLoadError
from .options import CredentialOptions

logger = logging.getLogger(__name__)

# Serial numbers are drawn from [1, 2**128); zero is not a valid serial.
SERIAL_NUMBER_BITS = 128

# RFC 5280 4.1.2.5: UTCTime through 2049, GeneralizedTime from 2050 on.
UTC_TIME_YEARS = range(1950, 2050)


class X509Utils:
    """Utility class for self-signed X.509 certificate operations."""

    @staticmethod
    def generate_private_key() -> ec.EllipticCurvePrivateKey:
        """
        Generate an elliptic-curve private key on P-384.

        Returns:
            EC private key object
        """
        logger.debug("Generating P-384 EC private key")
        return ec.generate_private_key(ec.SECP384R1())

    @staticmethod
    def generate_serial_number() -> int:
        """Draw a random 128-bit certificate serial number from the OS CSPRNG."""
        return secrets.randbelow((1 << SERIAL_NUMBER_BITS) - 1) + 1

    @staticmethod
    def build_subject(options: CredentialOptions) -> x509.Name:
        """
        Build the subject (and issuer) name for the certificate.

        Args:
            options: Credential options carrying common name and organization

        Returns:
            X.509 distinguished name
        """
        attributes = []
        if options.organization is not None:
            attributes.append(x509.NameAttribute(NameOID.ORGANIZATION_NAME, options.organization))
        # Empty or over-long common names are kept as configured.
        attributes.append(
            x509.NameAttribute(NameOID.COMMON_NAME, options.common_name, _validate=False)
        )
        return x509.Name(attributes)

    @staticmethod
    def create_self_signed_certificate(
        private_key: ec.EllipticCurvePrivateKey,
        options: CredentialOptions,
        serial_number: int,
        not_before: datetime,
    ) -> x509.Certificate:
        """
        Create a self-signed server certificate.

        Args:
            private_key: Key that both certifies and signs
            options: Identity and validity parameters
            serial_number: Certificate serial number
            not_before: Start of the validity window

        Returns:
            Signed certificate
        """
        logger.debug(f"Building self-signed certificate for: {options.common_name}")

        # Create subject and issuer (same for self-signed)
        subject = issuer = X509Utils.build_subject(options)
        public_key = private_key.public_key()

        # CertificateBuilder refuses a not-after before not-before (or before
        # 1950); sign a placeholder window and rewrite it below in that case.
        inverted = options.not_after < not_before
        builder_not_after = not_before if inverted else options.not_after

        cert = (
            x509.CertificateBuilder()
            .subject_name(subject)
            .issuer_name(issuer)
            .public_key(public_key)
            .serial_number(serial_number)
            .not_valid_before(not_before)
            .not_valid_after(builder_not_after)
            .add_extension(
                x509.BasicConstraints(ca=False, path_length=None),
                critical=True,
            )
            .add_extension(
                x509.KeyUsage(
                    digital_signature=True,
                    key_encipherment=True,
                    key_cert_sign=False,
                    crl_sign=False,
                    content_commitment=False,
                    data_encipherment=False,
                    key_agreement=False,
                    encipher_only=False,
                    decipher_only=False,
                ),
                critical=True,
            )
            .add_extension(
                x509.ExtendedKeyUsage([ExtendedKeyUsageOID.SERVER_AUTH]),
                critical=False,
            )
            .add_extension(
                x509.SubjectAlternativeName([x509.DNSName(options.common_name)]),
                critical=False,
            )
            .add_extension(
                x509.SubjectKeyIdentifier.from_public_key(public_key),
                critical=False,
            )
            .add_extension(
                x509.AuthorityKeyIdentifier.from_issuer_public_key(public_key),
                critical=False,
            )
            .sign(private_key, hashes.SHA384())
        )

        if inverted:
            cert = X509Utils.resign_with_validity(cert, private_key, not_before, options.not_after)

        return cert

    @staticmethod
    def resign_with_validity(
        cert: x509.Certificate,
        private_key: ec.EllipticCurvePrivateKey,
        not_before: datetime,
        not_after: datetime,
    ) -> x509.Certificate:
        """
        Replace the validity window of a self-signed certificate and re-sign it.

        The window is written as given, without ordering checks, so expired
        or inverted windows survive into the certificate.

        Args:
            cert: Certificate signed by private_key
            private_key: Key to re-sign with
            not_before: New start of the validity window
            not_after: New end of the validity window

        Returns:
            Re-signed certificate
        """
        original = asn1_x509.Certificate.load(cert.public_bytes(serialization.Encoding.DER))
        tbs = original["tbs_certificate"]
        tbs["validity"] = asn1_x509.Validity({
            "not_before": _asn1_time(not_before),
            "not_after": _asn1_time(not_after),
        })

        signature = private_key.sign(tbs.dump(), ec.ECDSA(hashes.SHA384()))
        signed = asn1_x509.Certificate({
            "tbs_certificate": tbs,
            "signature_algorithm": original["signature_algorithm"],
            "signature_value": signature,
        })

        logger.debug(f"Re-signed certificate with validity {not_before} .. {not_after}")
        return x509.load_der_x509_certificate(signed.dump())

    @staticmethod
    def encode_private_key(private_key: ec.EllipticCurvePrivateKey) -> bytes:
        """Encode an EC private key as an unencrypted ``EC PRIVATE KEY`` PEM block."""
        return private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.NoEncryption()
        )

    @staticmethod
    def encode_certificate(cert: x509.Certificate) -> bytes:
        """Encode a certificate as a ``CERTIFICATE`` PEM block."""
        return cert.public_bytes(serialization.Encoding.PEM)

    @staticmethod
    def load_key_pair(
        cert_pem: bytes,
        key_pem: bytes
    ) -> Tuple[x509.Certificate, ec.EllipticCurvePrivateKey]:
        """
        Parse a PEM certificate and PEM private key into a matching pair.

        Args:
            cert_pem: PEM-encoded certificate
            key_pem: PEM-encoded EC private key

        Returns:
            Tuple of (certificate, private_key)

        Raises:
            KeyPairLoadError: If either block is malformed, the key is not an
                EC key, or the key does not belong to the certificate
        """
        try:
            cert = x509.load_pem_x509_certificate(cert_pem)
        except ValueError as e:
            raise KeyPairLoadError(f"invalid certificate PEM: {e}") from e

        try:
            private_key = serialization.load_pem_private_key(key_pem, password=None)
        except (ValueError, TypeError) as e:
            raise KeyPairLoadError(f"invalid private key PEM: {e}") from e

        if not isinstance(private_key, ec.EllipticCurvePrivateKey):
            raise KeyPairLoadError(
                f"expected an EC private key, got {type(private_key).__name__}"
            )

        if _public_key_der(cert.public_key()) != _public_key_der(private_key.public_key()):
            raise KeyPairLoadError("private key does not match certificate public key")

        return cert, private_key


def _asn1_time(moment: datetime) -> asn1_x509.Time:
    moment = moment.astimezone(timezone.utc).replace(microsecond=0)
    if moment.year in UTC_TIME_YEARS:
        return asn1_x509.Time(name="utc_time", value=moment)
    return asn1_x509.Time(name="general_time", value=moment)


def _public_key_der(public_key) -> bytes:
    return public_key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
