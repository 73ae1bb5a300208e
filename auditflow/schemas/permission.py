"""Capability check, recipient discovery and permission override schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator


class CapabilityCheckResponse(BaseModel):
    """Response for GET /permissions/check."""

    capability: str
    allowed: bool


class UserCapabilityCheckResponse(CapabilityCheckResponse):
    """Response for GET /permissions/check/{user_id}."""

    user_id: str


class RecipientResponse(BaseModel):
    """One principal eligible for a capability."""

    model_config = ConfigDict(from_attributes=True)

    principal_id: str
    role_name: str
    department_name: str | None = None


class PermissionOverrideCreate(BaseModel):
    """Request body for granting (allowed=true) or revoking (allowed=false) a capability."""

    capability: str = Field(..., min_length=3, max_length=128, examples=["auditProgram:approve"])
    allowed: bool = True
    expires_at: datetime | None = None
    reason: str | None = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def expiry_only_on_grant(self) -> "PermissionOverrideCreate":
        if not self.allowed and self.expires_at is not None:
            raise ValueError("expires_at is only accepted when allowed is true")
        return self


class PermissionOverrideBatchItem(PermissionOverrideCreate):
    user_id: str = Field(..., min_length=1)


class PermissionOverrideBatchRequest(BaseModel):
    changes: list[PermissionOverrideBatchItem]


class PermissionOverrideResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    permission_id: str
    module: str
    action: str
    allowed: bool
    expires_at: datetime | None
    granted_by: str | None
    granted_at: datetime | None
    reason: str | None


class PermissionOverrideBatchResponse(BaseModel):
    updated_count: int
    results: list[PermissionOverrideResponse]


class RolePermissionUpdate(BaseModel):
    """Request body for PUT /role-permissions/{role_id}/{capability}."""

    allowed: bool


class RolePermissionBatchItem(BaseModel):
    role_id: str = Field(..., min_length=1)
    capability: str = Field(..., min_length=3, max_length=128)
    allowed: bool


class RolePermissionBatchRequest(BaseModel):
    changes: list[RolePermissionBatchItem]


class RolePermissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    role_id: str
    permission_id: str
    module: str
    action: str
    allowed: bool


class RolePermissionBatchResponse(BaseModel):
    updated_count: int
    results: list[RolePermissionResponse]
