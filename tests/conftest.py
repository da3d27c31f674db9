from collections.abc import Callable

import pytest

from crud_doubles import BASE_URL, FakeCrudServer
from crudstore import RemoteStore, Transport


@pytest.fixture
def server() -> FakeCrudServer:
    return FakeCrudServer()


@pytest.fixture
def store(server: FakeCrudServer) -> RemoteStore:
    return RemoteStore(Transport(server.client()), BASE_URL)


@pytest.fixture
def make_store() -> Callable[[FakeCrudServer], RemoteStore]:
    def build(fake: FakeCrudServer) -> RemoteStore:
        return RemoteStore(Transport(fake.client()), BASE_URL)

    return build
