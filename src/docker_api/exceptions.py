"""
Docker API Exceptions
"""

from typing import Any, Optional

from .call import ErrorKind


class DockerException(Exception):
    """Base Docker exception"""
    pass


class APIError(DockerException):
    """
    Docker API error

    Raised when the daemon answers with a status code that the operation
    does not treat as success.
    """

    def __init__(self, message: str, response: Any = None, status_code: Optional[int] = None,
                 kind: ErrorKind = ErrorKind.UNEXPECTED, resource: str = '',
                 label: str = '', explanation: str = ''):
        super().__init__(message)
        self.response = response
        self.status_code = status_code
        self.kind = kind
        self.resource = resource
        self.label = label or message
        self.explanation = explanation

    def __repr__(self):
        return f"{self.__class__.__name__}({self.status_code}, {self.label!r})"


class NotFound(APIError):
    """Resource does not exist"""
    pass


class ContainerNotFound(NotFound):
    """Container not found"""
    pass


class ImageNotFound(NotFound):
    """Image not found"""
    pass


class NetworkNotFound(NotFound):
    """Network not found"""
    pass


class VolumeNotFound(NotFound):
    """Volume not found"""
    pass


class Conflict(APIError):
    """Resource is busy, in use or already exists"""
    pass


class StreamError(DockerException):
    """A progress stream (pull, push, build) reported an error"""
    pass


NOT_FOUND_ERRORS = {
    'container': ContainerNotFound,
    'image': ImageNotFound,
    'network': NetworkNotFound,
    'volume': VolumeNotFound,
}


def create_api_error(status_code: int, kind: ErrorKind, label: str, resource: str = '',
                     explanation: str = '', response: Any = None) -> APIError:
    """
    Build the exception matching a failed status code

    Args:
        status_code: Observed HTTP status code
        kind: Error category from the operation's status table
        label: Human readable reason from the status table
        resource: Resource kind the call was made for
        explanation: Message returned by the daemon, if any
        response: Raw HTTP response

    Returns:
        APIError (or a subclass) ready to be raised
    """
    if kind is ErrorKind.NOT_FOUND:
        cls = NOT_FOUND_ERRORS.get(resource, NotFound)
    elif kind is ErrorKind.CONFLICT:
        cls = Conflict
    else:
        cls = APIError

    message = f"{resource} error: {label}" if resource else label
    if explanation:
        message = f"{message} ({explanation})"

    return cls(
        message,
        response=response,
        status_code=status_code,
        kind=kind,
        resource=resource,
        label=label,
        explanation=explanation,
    )
