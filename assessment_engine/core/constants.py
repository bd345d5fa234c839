from enum import Enum


class OrgRoleEnum(str, Enum):
    CANDIDATE = "candidate"
    CREATOR = "creator"
    ADMIN = "admin"
    OWNER = "owner"

ROLE_HIERARCHY = {
    OrgRoleEnum.CANDIDATE: 0,
    OrgRoleEnum.CREATOR: 1,
    OrgRoleEnum.ADMIN: 2,
    OrgRoleEnum.OWNER: 3,
}

class AssessmentStatusEnum(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"

class SessionStatusEnum(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"

TERMINAL_SESSION_STATUSES = (SessionStatusEnum.COMPLETED, SessionStatusEnum.TIMED_OUT)

class ErrorCode(str, Enum):
    # eligibility
    NOT_PUBLISHED = "NOT_PUBLISHED"
    INVALID_ACCESS_CODE = "INVALID_ACCESS_CODE"
    NOT_YET_OPEN = "NOT_YET_OPEN"
    CLOSED = "CLOSED"
    MAX_ATTEMPTS_REACHED = "MAX_ATTEMPTS_REACHED"
    COOLDOWN_ACTIVE = "COOLDOWN_ACTIVE"
    NO_QUESTIONS_AVAILABLE = "NO_QUESTIONS_AVAILABLE"

    # session state
    NOT_FOUND = "NOT_FOUND"
    ALREADY_COMPLETED = "ALREADY_COMPLETED"
    QUESTION_NOT_IN_SESSION = "QUESTION_NOT_IN_SESSION"
    NOT_SCORED = "NOT_SCORED"

    # management
    FORBIDDEN = "FORBIDDEN"
    INVALID_STATE = "INVALID_STATE"
    VALIDATION_ERROR = "VALIDATION_ERROR"

class TabEventTypeEnum(str, Enum):
    TAB_HIDDEN = "tab_hidden"

ASSESSMENT_SESSION_COMPLETED = "assessment_session_completed"
