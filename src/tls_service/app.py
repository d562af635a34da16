"""FastAPI application served over a self-signed credential."""

from datetime import datetime, timezone
import logging

from fastapi import FastAPI, HTTPException, status
from fastapi.responses import PlainTextResponse, Response

from selfsigned import CertificateVerifier, TLSConfig

from .models import CertificateInfo, HealthResponse

logger = logging.getLogger(__name__)


def create_app(tls_config: TLSConfig) -> FastAPI:
    """
    Create the development HTTPS application.

    Args:
        tls_config: Configuration whose certificate the app describes

    Returns:
        FastAPI application
    """
    app = FastAPI(
        title="Self-Signed TLS Service",
        description="Development HTTPS endpoint backed by an in-memory self-signed certificate",
        version="1.0.0",
    )
    app.state.tls_config = tls_config

    @app.get("/healthz", response_class=PlainTextResponse)
    async def healthz():
        """Liveness probe."""
        return "ok"

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """Health check endpoint with certificate expiry."""
        try:
            leaf = tls_config.certificate.leaf
            info = CertificateVerifier.describe_certificate(leaf)
            now = datetime.now(timezone.utc)

            return HealthResponse(
                status="healthy",
                common_name=info["subject"]["common_name"],
                expires_in_days=(leaf.not_valid_after_utc - now).days,
                timestamp=now,
            )
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Service unhealthy"
            )

    @app.get("/certificate", response_model=CertificateInfo)
    async def get_certificate_info():
        """Describe the certificate this server presents."""
        info = CertificateVerifier.describe_certificate(tls_config.certificate.leaf)
        return CertificateInfo(
            subject=info["subject"],
            issuer=info["issuer"],
            serial_number=str(info["serial_number"]),  # Convert to string for JavaScript compatibility
            not_valid_before=info["not_valid_before"],
            not_valid_after=info["not_valid_after"],
            dns_names=info["dns_names"],
            fingerprint_sha256=info["fingerprint_sha256"],
        )

    @app.get("/certificate/pem")
    async def download_certificate():
        """Download the served certificate in PEM format (never the key)."""
        return Response(
            content=tls_config.certificate.certificate_pem,
            media_type="application/x-pem-file",
        )

    return app
