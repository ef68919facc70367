"""Custom exception classes for the Controller."""


class FilesManagerError(Exception):
    """
    Base exception class for all Files Manager errors.
    """
    pass


class InvalidCredentialsError(FilesManagerError):
    """
    Raised when login credentials are malformed or do not match a user.
    """
    pass


class InvalidTokenError(FilesManagerError):
    """
    Raised when a session token is missing, unknown or expired.
    """
    pass


class BadRequestError(FilesManagerError):
    """
    Base class for malformed requests. The message is returned to the caller.
    """
    pass


class MissingFieldError(BadRequestError):
    pass


class InvalidDataError(BadRequestError):
    """
    Raised when an upload payload is not valid base64.
    """
    pass


class PasswordTooLongError(BadRequestError):
    """
    Raised when a password exceeds what bcrypt can hash.
    """
    pass


class UserAlreadyExistsError(BadRequestError):
    """
    Raised when attempting to register an email that already exists.
    """
    pass


class ParentNotFoundError(BadRequestError):
    pass


class ParentNotFolderError(BadRequestError):
    pass


class FolderContentError(BadRequestError):
    """
    Raised when content is requested for a folder.
    """
    pass


class InvalidSizeError(BadRequestError):
    """
    Raised when a thumbnail width other than 100, 250 or 500 is requested.
    """
    pass


class FileNotFoundError(FilesManagerError):
    """
    Raised when a file does not exist or is not accessible to the requester.
    """
    pass


class ObjectNotFoundError(FilesManagerError):
    """
    Raised by the object store when no object exists at a path.
    """
    pass


class FatalJobError(FilesManagerError):
    """
    Raised by a job handler when retrying the job can never succeed.
    """
    pass
