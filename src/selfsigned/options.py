"""Configuration record and option functions for credential generation."""

from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_COMMON_NAME = "localhost"
DEFAULT_ORGANIZATION = "self-signed"
DEFAULT_VALIDITY_YEARS = 10


def add_years(moment: datetime, years: int) -> datetime:
    """
    Shift a timestamp by whole calendar years.

    February 29 rolls over to March 1 when the target year is not a leap year.

    Args:
        moment: Starting timestamp
        years: Number of years to add (may be negative)

    Returns:
        Shifted timestamp with the same time of day and tzinfo
    """
    try:
        return moment.replace(year=moment.year + years)
    except ValueError:
        return moment.replace(year=moment.year + years, month=3, day=1)


def _default_not_after() -> datetime:
    return add_years(datetime.now(timezone.utc), DEFAULT_VALIDITY_YEARS)


class CredentialOptions(BaseModel):
    """Identity and validity parameters for a self-signed certificate."""

    model_config = ConfigDict(validate_assignment=True)

    common_name: str = Field(
        default=DEFAULT_COMMON_NAME,
        description="Subject common name, also used as the sole DNS SAN",
    )
    organization: Optional[str] = Field(
        default=DEFAULT_ORGANIZATION,
        description="Subject organization (None omits the attribute)",
    )
    not_after: datetime = Field(
        default_factory=_default_not_after,
        description="End of the validity window",
    )
    insecure_skip_verify: bool = Field(
        default=False,
        description="Disable peer verification for client-side contexts",
    )

    @field_validator("not_after")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        # Naive timestamps are taken to be UTC, matching cryptography's builder.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


ConfigOption = Callable[[CredentialOptions], None]


def common_name(name: str) -> ConfigOption:
    """Set the certificate subject common name."""
    def apply(options: CredentialOptions) -> None:
        options.common_name = name
    return apply


def organization(name: Optional[str]) -> ConfigOption:
    """Set the certificate subject organization, or None to leave it out."""
    def apply(options: CredentialOptions) -> None:
        options.organization = name
    return apply


def not_after(moment: datetime) -> ConfigOption:
    """Override the default ten-year validity horizon."""
    def apply(options: CredentialOptions) -> None:
        options.not_after = moment
    return apply


def insecure_skip_verify(enabled: bool = True) -> ConfigOption:
    """
    Mark the resulting configuration to skip peer verification as a client.

    Never enabled implicitly; a consumer has to ask for it.
    """
    def apply(options: CredentialOptions) -> None:
        options.insecure_skip_verify = enabled
    return apply


def apply_options(opts: Iterable[ConfigOption]) -> CredentialOptions:
    """
    Build a configuration record from defaults and an override chain.

    Args:
        opts: Option callables, applied in order; later ones win

    Returns:
        Populated CredentialOptions
    """
    options = CredentialOptions()
    for opt in opts:
        opt(options)
    return options
