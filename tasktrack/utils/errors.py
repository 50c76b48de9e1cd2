# tasktrack/utils/errors.py
from fastapi import status


class TaskTrackError(Exception):
    """Base class for failures returned by the policy engine and lifecycle"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Request failed"

    def __init__(self, detail: str = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class NotFoundError(TaskTrackError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class ForbiddenError(TaskTrackError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Unauthorized access"


class ValidationError(TaskTrackError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class LockedError(TaskTrackError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Approved tasks are locked"


class InternalFailureError(TaskTrackError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal failure"


class HierarchyCycleError(InternalFailureError):
    """The manager graph loops back on itself"""

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"Manager hierarchy contains a cycle at user {user_id}")
