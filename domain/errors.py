class DomainError(Exception):
    code = "E_DOMAIN"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)


class NotFoundError(DomainError):
    code = "E_NOT_FOUND"


class ValidationError(DomainError):
    code = "E_VALIDATION"


class StorageUnavailableError(DomainError):
    code = "E_STORAGE_UNAVAILABLE"


class AchievementAlreadyUnlocked(DomainError):
    """Raised by an achievement store when (user, type) is already present."""

    code = "E_ALREADY_UNLOCKED"
