"""
Error taxonomy shared by the storage adapters and the engine.

``LogNotFound`` is a normal state for callers of the synchronizer (an
empty log is synthesized); ``TransientStoreError`` covers every other
storage or network failure and is surfaced as non-fatal.
"""


class LogNotFound(LookupError):
    def __init__(self, user_id: str, day: str):
        super().__init__(f"LOG_NOT_FOUND: no daily log for user {user_id} on {day}")
        self.user_id = user_id
        self.day = day


class ProfileNotFound(LookupError):
    def __init__(self, user_id: str):
        super().__init__(f"PROFILE_NOT_FOUND: no profile for user {user_id}")
        self.user_id = user_id


class TransientStoreError(RuntimeError):
    """Storage failure the caller may retry or surface."""
