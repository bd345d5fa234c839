from assessment_engine.core.constants import OrgRoleEnum, ROLE_HIERARCHY
from assessment_engine.schemas.context import OrgUserContext


class PermissionHelper:
    @staticmethod
    def has_minimum_role(context: OrgUserContext, required: OrgRoleEnum) -> bool:
        return ROLE_HIERARCHY[context.role] >= ROLE_HIERARCHY[required]

    @staticmethod
    def is_creator_or_above(context: OrgUserContext) -> bool:
        return PermissionHelper.has_minimum_role(context, OrgRoleEnum.CREATOR)

    @staticmethod
    def belongs_to_org(context: OrgUserContext, org_id: int) -> bool:
        return context.org_id == org_id


permission_helper = PermissionHelper()
