class MeetingServiceError(Exception):
    """Base class for failures raised by the meeting service."""


class MeetingValidationError(MeetingServiceError, ValueError):
    pass


class UserNotFoundError(MeetingServiceError, LookupError):
    pass


class MeetingNotFoundError(MeetingServiceError, LookupError):
    """Meeting is absent, the caller may not act on it, or it is in the wrong state.

    The three cases share one error so callers cannot probe for meetings
    they do not participate in.
    """


class StoreError(MeetingServiceError, RuntimeError):
    pass
