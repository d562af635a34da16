"""Unit tests for certificate verification."""

import ipaddress
from datetime import datetime, timedelta, timezone

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from selfsigned import (
    CertificateVerificationError,
    CertificateVerifier,
    build_tls_config,
    common_name,
)


def _certificate_with_sans(names, key=None) -> x509.Certificate:
    """Build a bare self-signed certificate carrying the given SAN entries."""
    key = key or ec.generate_private_key(ec.SECP384R1())
    subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "san-test")])
    now = datetime.now(timezone.utc)

    builder = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(subject)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + timedelta(days=1))
    )
    if names:
        builder = builder.add_extension(x509.SubjectAlternativeName(names), critical=False)
    return builder.sign(key, hashes.SHA384())


class TestHostnameVerification:
    """Test hostname matching against subject alternative names."""

    def test_common_name_matches(self, example_tls_config):
        leaf = example_tls_config.certificate.leaf
        assert CertificateVerifier.verify_hostname(leaf, "example.com") is True

    def test_case_and_trailing_dot_ignored(self, example_tls_config):
        leaf = example_tls_config.certificate.leaf

        assert CertificateVerifier.verify_hostname(leaf, "EXAMPLE.com") is True
        assert CertificateVerifier.verify_hostname(leaf, "example.com.") is True

    def test_other_host_rejected(self, example_tls_config):
        leaf = example_tls_config.certificate.leaf

        with pytest.raises(CertificateVerificationError, match="not www.example.com"):
            CertificateVerifier.verify_hostname(leaf, "www.example.com")

    def test_no_san_fails_even_if_common_name_matches(self):
        cert = _certificate_with_sans([])

        with pytest.raises(CertificateVerificationError, match="no subject alternative names"):
            CertificateVerifier.verify_hostname(cert, "san-test")

    def test_wildcard_matches_single_label(self):
        cert = _certificate_with_sans([x509.DNSName("*.example.com")])

        assert CertificateVerifier.verify_hostname(cert, "api.example.com") is True
        with pytest.raises(CertificateVerificationError):
            CertificateVerifier.verify_hostname(cert, "a.b.example.com")
        with pytest.raises(CertificateVerificationError):
            CertificateVerifier.verify_hostname(cert, "example.com")

    def test_ip_literal_uses_ip_sans(self):
        cert = _certificate_with_sans([
            x509.DNSName("127.0.0.1"),
            x509.IPAddress(ipaddress.ip_address("::1")),
        ])

        assert CertificateVerifier.verify_hostname(cert, "[::1]") is True
        with pytest.raises(CertificateVerificationError):
            CertificateVerifier.verify_hostname(cert, "127.0.0.1")

    def test_generated_localhost(self, default_tls_config):
        leaf = default_tls_config.certificate.leaf
        assert CertificateVerifier.verify_hostname(leaf, "localhost") is True


class TestSignatureAndValidity:
    """Test self-signature and validity checks."""

    def test_self_signature_valid(self, example_tls_config):
        assert CertificateVerifier.verify_self_signature(example_tls_config.certificate.leaf) is True

    def test_signature_from_other_key_rejected(self):
        signer = ec.generate_private_key(ec.SECP384R1())
        other = ec.generate_private_key(ec.SECP384R1())
        subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "mismatch")])
        now = datetime.now(timezone.utc)

        cert = (
            x509.CertificateBuilder()
            .subject_name(subject)
            .issuer_name(subject)
            .public_key(other.public_key())
            .serial_number(x509.random_serial_number())
            .not_valid_before(now)
            .not_valid_after(now + timedelta(days=1))
            .sign(signer, hashes.SHA384())
        )

        with pytest.raises(CertificateVerificationError, match="Invalid self-signature"):
            CertificateVerifier.verify_self_signature(cert)

    def test_validity_now(self, default_tls_config):
        assert CertificateVerifier.verify_validity(default_tls_config.certificate.leaf) is True

    def test_expired_after_not_after(self, example_tls_config, example_not_after):
        with pytest.raises(CertificateVerificationError, match="expired"):
            CertificateVerifier.verify_validity(
                example_tls_config.certificate.leaf,
                at=example_not_after + timedelta(seconds=1),
            )

    def test_not_yet_valid(self, default_tls_config, expired_timestamp):
        with pytest.raises(CertificateVerificationError, match="not yet valid"):
            CertificateVerifier.verify_validity(
                default_tls_config.certificate.leaf,
                at=expired_timestamp,
            )


class TestDescribeCertificate:
    """Test certificate information extraction."""

    def test_describe(self, example_tls_config, example_not_after):
        leaf = example_tls_config.certificate.leaf
        info = CertificateVerifier.describe_certificate(leaf)

        assert info["subject"] == {"common_name": "example.com", "organization": "self-signed"}
        assert info["issuer"] == info["subject"]
        assert info["serial_number"] == leaf.serial_number
        assert info["not_valid_after"] == example_not_after.isoformat()
        assert info["dns_names"] == ["example.com"]
        assert len(info["fingerprint_sha256"]) == 64

    def test_fingerprint_algorithms(self, default_tls_config):
        leaf = default_tls_config.certificate.leaf

        assert len(CertificateVerifier.get_certificate_fingerprint(leaf, "sha1")) == 40
        with pytest.raises(ValueError, match="Unsupported algorithm"):
            CertificateVerifier.get_certificate_fingerprint(leaf, "md5")

    def test_fingerprints_differ_between_calls(self):
        first = build_tls_config(common_name("example.com")).certificate.leaf
        second = build_tls_config(common_name("example.com")).certificate.leaf

        assert (
            CertificateVerifier.get_certificate_fingerprint(first)
            != CertificateVerifier.get_certificate_fingerprint(second)
        )
