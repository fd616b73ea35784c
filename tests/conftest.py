import io
from typing import Any, List

import pytest

from docker_api.call import Call
from docker_api.client import DockerClient
from docker_api.exceptions import create_api_error
from docker_api.stream import Stream


class Status:
    """Scripted daemon answer carrying only a status code"""

    def __init__(self, code: int, message: str = ''):
        self.code = code
        self.message = message


class FakeModem:
    """Records dialed calls and answers them from a script"""

    def __init__(self):
        self.calls: List[Call] = []
        self.script: List[Any] = []

    def reply(self, *results):
        self.script.extend(results)
        return self

    def fail(self, code: int, message: str = ''):
        self.script.append(Status(code, message))
        return self

    @property
    def last(self) -> Call:
        return self.calls[-1]

    async def dial(self, call: Call) -> Any:
        self.calls.append(call)
        result = self.script.pop(0) if self.script else None
        if isinstance(result, Status):
            if call.status_codes.is_success(result.code):
                return None
            failure = call.status_codes.failure(result.code)
            raise create_api_error(
                result.code,
                failure.kind,
                failure.label,
                resource=failure.resource or call.resource,
                explanation=result.message,
            )
        return result


def byte_stream(data: bytes, chunk_size: int = 4) -> Stream:
    return Stream(io.BytesIO(data), chunk_size=chunk_size)


@pytest.fixture
def modem() -> FakeModem:
    return FakeModem()


@pytest.fixture
def client(modem) -> DockerClient:
    return DockerClient(modem=modem)
