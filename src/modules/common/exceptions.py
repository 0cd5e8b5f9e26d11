"""Domain exception classes for business logic errors."""


class DomainError(Exception):
    """Base class for all domain-specific errors."""

    pass


class ResourceNotFoundError(DomainError):
    """Raised when a requested resource cannot be found."""

    pass


class ResourceExistsError(DomainError):
    """Raised when attempting to create a resource that already exists."""

    pass


class ConflictError(DomainError):
    """Raised when the current state of a resource forbids the operation."""

    pass


class ValidationError(DomainError):
    """Raised when data validation fails."""

    pass


class StudentNotFoundError(ResourceNotFoundError):
    """Raised when a student cannot be found."""

    pass


class BookNotFoundError(ResourceNotFoundError):
    """Raised when a book cannot be found."""

    pass


class DuplicateIsbnError(ResourceExistsError):
    """Raised when a book is added with an ISBN that is already catalogued."""

    pass


class BookUnavailableError(ConflictError):
    """Raised when borrowing a book that is already out on loan."""

    pass


class InvalidFilterError(ValidationError):
    """Raised when a client-supplied filter uses an unknown field, operator or operand."""

    pass
