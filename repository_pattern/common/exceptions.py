"""
Exception hierarchy shared by repositories, services and the container.

Every failure raised by a repository or service operation derives from
``RepositoryFailure`` and carries an HTTP-style ``status_code`` so a web layer
can map it straight to a response.
"""


class RepositoryException(Exception):
    """Base exception for repository operations."""

    pass


class InvalidModel(RepositoryException):
    """Raised when a repository is built around something that is not a mapped model."""

    pass


class RepositoryFailure(RepositoryException):
    """Raised when a repository operation fails or is refused."""

    default_message = "Repository operation failed."
    default_status_code = 500

    def __init__(self, message: str | None = None, status_code: int | None = None) -> None:
        self.message = message or self.default_message
        self.status_code = status_code if status_code is not None else self.default_status_code
        super().__init__(self.message)


class EntityNotFound(RepositoryFailure):
    """Raised when entity is not found."""

    default_message = "Record not found."
    default_status_code = 404


class DuplicateEntity(RepositoryFailure):
    """Raised when duplicate entity creation is attempted."""

    default_message = "Record already exists."
    default_status_code = 409


class RepositoryError(RepositoryFailure):
    """Generic database error raised while executing a repository operation."""

    pass


class BindingResolutionError(RepositoryException):
    """Raised when the container cannot build the requested abstract."""

    pass
