"""User schemas for the backend account and the signed-in session."""

from pydantic import BaseModel, ConfigDict, Field

AWAITING_APPROVAL_STATUSES = frozenset({"pending", "pendiente", "rejected", "rechazado"})


class BackendUser(BaseModel):
    """User record returned by the backend's login and ``/api/auth/me``."""

    model_config = ConfigDict(extra="ignore")

    id: str = ""
    email: str = ""
    user: str | None = None
    company: str = ""
    role: str | None = None
    permissions: list[str] | None = None
    status: str | None = None
    last_login: str | None = None
    created_at: str | None = None

    @property
    def identifier(self) -> str:
        return self.email


class SessionUser(BaseModel):
    """Identity stored in the session cookie and handed to every page route."""

    user: str
    status: str = "active"
    role: str = "user"
    permissions: list[str] = Field(default_factory=list)
    company: str | None = None

    @property
    def identifier(self) -> str:
        return self.user

    @classmethod
    def from_backend(cls, backend_user: BackendUser, company: str) -> "SessionUser":
        return cls(
            user=backend_user.identifier,
            status=backend_user.status or "active",
            role=backend_user.role or "user",
            permissions=backend_user.permissions or [],
            company=company,
        )


class CurrentUser(BaseModel):
    """A verified session: the user plus the access token used against the backend."""

    user: SessionUser
    access_token: str


class CompanyUser(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str = ""
    email: str = ""
    role: str = "user"
    company: str = ""
    status: str = "active"
    last_login: str | None = None
    created_at: str | None = None


class UserListResponse(BaseModel):
    users: list[CompanyUser]
    error: str | None = None


class ReportsResponse(BaseModel):
    user: SessionUser
