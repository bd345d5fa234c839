from pydantic import BaseModel, ConfigDict

from assessment_engine.core.constants import OrgRoleEnum

class OrgUserContext(BaseModel):
    """An already-authorized caller: who they are, which org, and their role in it."""
    user_id: int
    org_id: int
    role: OrgRoleEnum

    model_config = ConfigDict(frozen=True)
