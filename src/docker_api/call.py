"""
Request descriptors and status-code tables
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, BinaryIO, Dict, Mapping, Optional, Union


class ErrorKind(Enum):
    """Category of a recognized non-success status code"""

    BAD_REQUEST = 'bad request'
    BAD_PARAMETER = 'bad parameter'
    PERMISSION_DENIED = 'permission denied'
    NOT_FOUND = 'not found'
    CONFLICT = 'conflict'
    NOT_ACCEPTABLE = 'not acceptable'
    SERVER_ERROR = 'server error'
    NOT_IMPLEMENTED = 'not implemented'
    UNAVAILABLE = 'unavailable'
    UNEXPECTED = 'unexpected'


@dataclass(frozen=True)
class Failure:
    """Outcome of a status code that the daemon uses to report an error"""

    kind: ErrorKind
    label: str
    #: Resource the failure refers to when it differs from the call's
    resource: str = ''


def bad_request(label: str = 'bad request') -> Failure:
    return Failure(ErrorKind.BAD_REQUEST, label)


def bad_parameter(label: str = 'bad parameter') -> Failure:
    return Failure(ErrorKind.BAD_PARAMETER, label)


def forbidden(label: str) -> Failure:
    return Failure(ErrorKind.PERMISSION_DENIED, label)


def not_found(label: str, resource: str = '') -> Failure:
    return Failure(ErrorKind.NOT_FOUND, label, resource)


def conflict(label: str = 'conflict') -> Failure:
    return Failure(ErrorKind.CONFLICT, label)


def not_acceptable(label: str) -> Failure:
    return Failure(ErrorKind.NOT_ACCEPTABLE, label)


def unavailable(label: str) -> Failure:
    return Failure(ErrorKind.UNAVAILABLE, label)


SERVER_ERROR = Failure(ErrorKind.SERVER_ERROR, 'server error')
NOT_IN_SWARM = unavailable('node is not part of a swarm')


Outcome = Union[bool, Failure]


class StatusCodes:
    """
    Immutable table mapping HTTP status codes to outcomes

    A code maps either to ``True`` (success) or to a :class:`Failure`.
    Codes missing from the table are unexpected.
    """

    def __init__(self, outcomes: Mapping[int, Outcome]):
        for code, outcome in outcomes.items():
            if outcome is not True and not isinstance(outcome, Failure):
                raise TypeError(f"Invalid outcome for HTTP {code}: {outcome!r}")
        self._outcomes = MappingProxyType(dict(outcomes))

    def __repr__(self):
        return f"StatusCodes({dict(self._outcomes)!r})"

    def __contains__(self, code: int) -> bool:
        return code in self._outcomes

    def get(self, code: int) -> Optional[Outcome]:
        return self._outcomes.get(code)

    def is_success(self, code: int) -> bool:
        return self._outcomes.get(code) is True

    def failure(self, code: int) -> Failure:
        """
        Failure for a non-success code

        Args:
            code: Observed HTTP status code

        Returns:
            The declared failure, or an UNEXPECTED one for unknown codes
        """
        outcome = self._outcomes.get(code)
        if isinstance(outcome, Failure):
            return outcome
        return Failure(ErrorKind.UNEXPECTED, f"(HTTP code {code}) unexpected")


@dataclass(frozen=True)
class Call:
    """
    Description of a single request to the Docker daemon

    Built fresh by every resource operation and handed to the modem.
    ``path`` carries no query string; ``params`` are encoded by the modem.
    """

    path: str
    method: str
    status_codes: StatusCodes
    resource: str = ''
    params: Optional[Dict[str, Any]] = None
    data: Any = None
    stream: bool = False
    file: Optional[Union[bytes, BinaryIO]] = None
    authconfig: Optional[Dict[str, Any]] = None
    registryconfig: Optional[Dict[str, Any]] = None
    hijack: bool = False
    open_stdin: bool = False
    #: Wait for the response without a socket timeout (e.g. container wait)
    no_timeout: bool = False
