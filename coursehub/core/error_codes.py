class ErrorCode:
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    FORBIDDEN = "FORBIDDEN"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    INTERNAL = "INTERNAL"

    INVALID_TOKEN = "INVALID_TOKEN"
    INVALID_USER = "INVALID_USER"
    INSTRUCTOR_ONLY = "INSTRUCTOR_ONLY"
    STUDENT_ONLY = "STUDENT_ONLY"

    COURSE_NOT_FOUND = "COURSE_NOT_FOUND"
    COURSE_CODE_EXISTS = "COURSE_CODE_EXISTS"
    COURSE_NOT_OWNER = "COURSE_NOT_OWNER"
    COURSE_FULL = "COURSE_FULL"
    MODULE_NOT_FOUND = "MODULE_NOT_FOUND"
    MATERIAL_NOT_FOUND = "MATERIAL_NOT_FOUND"

    ALREADY_ENROLLED = "ALREADY_ENROLLED"
    NOT_ENROLLED = "NOT_ENROLLED"

    ASSIGNMENT_NOT_FOUND = "ASSIGNMENT_NOT_FOUND"
    SUBMISSION_NOT_FOUND = "SUBMISSION_NOT_FOUND"
    SUBMISSION_ACCESS_DENIED = "SUBMISSION_ACCESS_DENIED"
    POINTS_OUT_OF_RANGE = "POINTS_OUT_OF_RANGE"
