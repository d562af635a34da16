"""Exceptions raised while building self-signed TLS credentials."""


class CredentialError(Exception):
    """Base class for failures while building a TLS credential.

    The ``stage`` attribute names the generation step that failed so callers
    can tell a key-generation failure from a signing failure without parsing
    the message.
    """

    stage = "credential"

    def __init__(self, message: str):
        super().__init__(f"{self.stage}: {message}")
        self.message = message


class OptionsError(CredentialError):
    """An option carried a value of the wrong type."""

    stage = "options"


class KeyGenerationError(CredentialError):
    """The elliptic-curve key pair could not be generated."""

    stage = "key generation"


class SerialNumberError(CredentialError):
    """A random serial number could not be drawn."""

    stage = "serial number"


class CertificateCreationError(CredentialError):
    """The certificate could not be built or self-signed."""

    stage = "certificate creation"


class KeyEncodingError(CredentialError):
    """The private key could not be PEM-encoded."""

    stage = "key encoding"


class KeyPairLoadError(CredentialError):
    """The PEM blocks could not be reassembled into a certificate/key pair."""

    stage = "key pair load"


class CertificateVerificationError(Exception):
    """Exception raised when certificate verification fails."""
    pass
