"""Department HOD pointer schemas."""

from pydantic import BaseModel, ConfigDict


class HodDriftResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    department_id: str
    department_name: str
    stored_hod_id: str | None
    expected_hod_id: str | None
