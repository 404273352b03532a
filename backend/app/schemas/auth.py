"""Login and registration schemas."""

from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""
    company: str = ""


class LoginPageResponse(BaseModel):
    companies: list[str]


class LoginErrorResponse(BaseModel):
    error: str


class RegisterPageResponse(BaseModel):
    companies: list[str]
    server_error: str | None = None


class RegistrationRequest(BaseModel):
    """Combined registration form for client companies and providers."""

    company_type: Literal["client", "provider"]
    provider_type: Literal["legal", "personal"] | None = None
    company: str = Field(..., min_length=1)
    provider_company: str | None = None
    vendor_legal_name: str | None = None
    company_email: str | None = Field(default=None, pattern=EMAIL_PATTERN)
    name: str | None = None
    lastname: str | None = None
    email: str = Field(..., pattern=EMAIL_PATTERN)
    rfc: str = Field(..., min_length=12, max_length=13)
    phone: str | None = None
    password: str = Field(..., min_length=8)

    @model_validator(mode="after")
    def _check_required_by_type(self) -> "RegistrationRequest":
        if self.company_type == "provider":
            if self.provider_type is None:
                raise ValueError("provider_type is required for provider registration")
            if self.provider_type == "legal" and not (self.name and self.lastname):
                raise ValueError("Contact name and lastname are required for legal providers")
        elif not (self.name and self.lastname):
            raise ValueError("Contact name and lastname are required")
        return self

    def to_company_payload(self) -> dict[str, Any]:
        """Payload expected by ``POST /company/register``."""
        return {
            "companyName": self.company,
            "companyEmail": self.company_email or self.email,
            "rfc": self.rfc,
            "adminName": f"{self.name} {self.lastname}",
            "adminEmail": self.email,
            "adminPassword": self.password,
        }

    def to_vendor_payload(self) -> dict[str, Any]:
        """Payload expected by ``POST /api/auth/register-vendor``."""
        is_legal = self.provider_type == "legal"
        payload: dict[str, Any] = {
            "company": self.company,
            "email": self.email,
            "password": self.password,
            "vendor_rfc": self.rfc,
            "vendor_company_type": self.provider_type,
            "vendor_legal_name": (
                (self.vendor_legal_name or "") if is_legal else (self.provider_company or "")
            ),
            "clients": [self.company],
        }
        if is_legal:
            payload["contact_name"] = self.name
            payload["contact_lastname"] = self.lastname
        return payload


class RegistrationResponse(BaseModel):
    success: str
