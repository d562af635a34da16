"""Self-signed TLS credential builder."""

from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional
import logging
import ssl
import tempfile

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import ec
from pydantic import ValidationError

from .errors import (
    CertificateCreationError,
    CredentialError,
    KeyEncodingError,
    KeyGenerationError,
    KeyPairLoadError,
    OptionsError,
    SerialNumberError,
)
from .options import ConfigOption, apply_options
from .x509_utils import X509Utils

logger = logging.getLogger(__name__)

SERVER_CIPHERS = 'HIGH:!aNULL:!eNULL:!EXPORT:!DES:!MD5:!PSK:!RC4'


class TLSCertificate:
    """A leaf certificate together with the private key it was issued for."""

    def __init__(
        self,
        certificate_pem: bytes,
        private_key_pem: bytes,
        leaf: x509.Certificate,
        private_key: ec.EllipticCurvePrivateKey,
    ):
        self.certificate_pem = certificate_pem
        self.private_key_pem = private_key_pem
        self.leaf = leaf
        self.private_key = private_key

    @property
    def serial_number(self) -> int:
        return self.leaf.serial_number

    def __repr__(self) -> str:
        return f"TLSCertificate(subject={self.leaf.subject.rfc4514_string()!r}, serial={self.serial_number})"


class TLSConfig:
    """
    Transport-security configuration holding a generated credential.

    The object owns the only copy of the private key. ``ssl`` can only load
    key material from files, so building a context writes the PEM blocks into
    a private temporary directory that is removed before the call returns.
    """

    def __init__(self, certificates: List[TLSCertificate], insecure_skip_verify: bool = False):
        self.certificates = certificates
        self.insecure_skip_verify = insecure_skip_verify

    @property
    def certificate(self) -> TLSCertificate:
        return self.certificates[0]

    def server_context(self) -> ssl.SSLContext:
        """
        Create an SSL context that presents the credential as a server.

        Returns:
            Server-side SSL context
        """
        context = ssl.create_default_context(ssl.Purpose.CLIENT_AUTH)
        context.minimum_version = ssl.TLSVersion.TLSv1_2
        context.set_ciphers(SERVER_CIPHERS)
        self._load_cert_chain(context)
        return context

    def client_context(self, insecure_skip_verify: Optional[bool] = None) -> ssl.SSLContext:
        """
        Create an SSL context for connecting to a peer that serves this credential.

        The credential's own certificate is the only trust anchor and is
        trusted directly (partial chain), since it is not a CA. Hostname checks
        stay on unless verification is skipped.

        Args:
            insecure_skip_verify: Override the configuration's skip-verify flag

        Returns:
            Client-side SSL context
        """
        skip = self.insecure_skip_verify if insecure_skip_verify is None else insecure_skip_verify

        context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
        context.minimum_version = ssl.TLSVersion.TLSv1_2

        if skip:
            logger.warning("Peer verification disabled for client context")
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        else:
            context.load_verify_locations(cadata=self.certificate.certificate_pem.decode())
            context.verify_flags |= ssl.VERIFY_X509_PARTIAL_CHAIN

        self._load_cert_chain(context)
        return context

    def _load_cert_chain(self, context: ssl.SSLContext) -> None:
        credential = self.certificate
        with tempfile.TemporaryDirectory(prefix="selfsigned-") as tmp:
            cert_path = Path(tmp) / "cert.pem"
            key_path = Path(tmp) / "key.pem"

            cert_path.write_bytes(credential.certificate_pem)
            key_path.touch(mode=0o600)
            key_path.write_bytes(credential.private_key_pem)

            context.load_cert_chain(certfile=str(cert_path), keyfile=str(key_path))


def build_tls_config(*opts: ConfigOption) -> TLSConfig:
    """
    Generate a fresh self-signed certificate and wrap it in a TLSConfig.

    Every call creates a new P-384 key and a new random serial number; nothing
    is cached between calls.

    Args:
        *opts: Option callables from ``selfsigned.options``, applied in order
            over the defaults (CN ``localhost``, O ``self-signed``, ten years)

    Returns:
        TLSConfig holding exactly one certificate

    Raises:
        CredentialError: Stage-specific subclass naming the step that failed
    """
    try:
        options = apply_options(opts)
    except ValidationError as e:
        raise OptionsError(f"invalid option value: {e}") from e

    logger.info(f"Building self-signed credential for: {options.common_name}")

    try:
        private_key = X509Utils.generate_private_key()
    except Exception as e:
        raise KeyGenerationError(f"failed to generate private key: {e}") from e

    try:
        serial_number = X509Utils.generate_serial_number()
    except Exception as e:
        raise SerialNumberError(f"failed to generate serial number: {e}") from e

    try:
        cert = X509Utils.create_self_signed_certificate(
            private_key,
            options,
            serial_number=serial_number,
            not_before=datetime.now(timezone.utc),
        )
    except Exception as e:
        raise CertificateCreationError(f"failed to create certificate: {e}") from e

    try:
        key_pem = X509Utils.encode_private_key(private_key)
    except Exception as e:
        raise KeyEncodingError(f"failed to marshal private key: {e}") from e

    cert_pem = X509Utils.encode_certificate(cert)

    try:
        leaf, loaded_key = X509Utils.load_key_pair(cert_pem, key_pem)
    except CredentialError:
        raise
    except Exception as e:
        raise KeyPairLoadError(f"failed to load key pair: {e}") from e

    credential = TLSCertificate(
        certificate_pem=cert_pem,
        private_key_pem=key_pem,
        leaf=leaf,
        private_key=loaded_key,
    )

    logger.info(
        f"Self-signed credential created: {options.common_name} "
        f"(serial: {serial_number}, expires: {leaf.not_valid_after_utc.isoformat()})"
    )
    return TLSConfig(
        certificates=[credential],
        insecure_skip_verify=options.insecure_skip_verify,
    )
