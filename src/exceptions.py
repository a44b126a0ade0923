class ShortenerError(Exception):
    """Base class for every error raised by the shortener core."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class InvalidInput(ShortenerError):
    def __init__(self, field: str, details: str):
        self.field = field
        self.details = details
        super().__init__(f"Invalid value for '{field}': {details}")


class Conflict(ShortenerError):
    """Raised by the store when an id is already taken. Never leaves the service."""

    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f"Short id already exists: {slug}")


class ExhaustedRetries(ShortenerError):
    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(
            f"Could not generate a unique short id after {attempts} attempts"
        )


class NotFound(ShortenerError):
    def __init__(self, record_type: str, identifier: str):
        self.record_type = record_type
        self.identifier = identifier
        super().__init__(f"{record_type} not found for identifier: {identifier}")


class Unavailable(ShortenerError):
    """A backend could not be reached or did not answer in time."""

    def __init__(self, backend: str, details: str):
        self.backend = backend
        self.details = details
        super().__init__(f"{backend} unavailable: {details}")


class Internal(ShortenerError):
    """Any other failure reported by a backend."""

    def __init__(self, backend: str, details: str):
        self.backend = backend
        self.details = details
        super().__init__(f"{backend} error: {details}")
