import socket

import pytest


@pytest.fixture()
def sockpair():
    """Connected stream socketpair: (reader side, writer side)."""
    a, b = socket.socketpair()
    yield a, b
    a.close()
    b.close()
