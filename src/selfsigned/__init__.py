"""Generate in-memory self-signed TLS credentials."""

from .credential import TLSCertificate, TLSConfig, build_tls_config
from .errors import (
    CertificateCreationError,
    CertificateVerificationError,
    CredentialError,
    KeyEncodingError,
    KeyGenerationError,
    KeyPairLoadError,
    OptionsError,
    SerialNumberError,
)
from .options import (
    CredentialOptions,
    common_name,
    insecure_skip_verify,
    not_after,
    organization,
)
from .verification import CertificateVerifier

__all__ = [
    'TLSCertificate',
    'TLSConfig',
    'build_tls_config',
    'CredentialOptions',
    'common_name',
    'organization',
    'not_after',
    'insecure_skip_verify',
    'CertificateVerifier',
    'CredentialError',
    'KeyGenerationError',
    'SerialNumberError',
    'CertificateCreationError',
    'KeyEncodingError',
    'KeyPairLoadError',
    'OptionsError',
    'CertificateVerificationError',
]
