"""Shared test fixtures."""

import asyncio

import numpy as np
import pytest


class FakeProcess:
    """Stands in for asyncio.subprocess.Process with scripted pipe contents.

    Must be constructed inside a running event loop.
    """

    def __init__(
        self,
        stdout: bytes = b"",
        stderr: bytes = b"",
        returncode: int = 0,
        exits: bool = True,
    ) -> None:
        self.stdout = asyncio.StreamReader()
        self.stderr = asyncio.StreamReader()
        if stdout:
            self.stdout.feed_data(stdout)
        if stderr:
            self.stderr.feed_data(stderr)
        self.stderr.feed_eof()
        if exits:
            self.stdout.feed_eof()
        self.returncode = None
        self.killed = False
        self._exit_code = returncode

    def kill(self) -> None:
        self.killed = True
        self._exit_code = -9
        self.stdout.feed_eof()

    async def wait(self) -> int:
        self.returncode = self._exit_code
        return self.returncode

    async def communicate(self):
        out = await self.stdout.read()
        err = await self.stderr.read()
        await self.wait()
        return out, err


def _make_spawner(*factories):
    """Fake create_subprocess_exec that builds one FakeProcess per call."""
    calls: list[tuple] = []
    queue = list(factories)

    async def create_subprocess_exec(*cmd, **kwargs):
        calls.append(cmd)
        return queue.pop(0)()

    create_subprocess_exec.calls = calls
    return create_subprocess_exec


@pytest.fixture
def f32le():
    """Encode floats as headerless little-endian float32 bytes."""
    def encode(values) -> bytes:
        return np.asarray(values, dtype="<f4").tobytes()
    return encode


@pytest.fixture
def fake_process():
    return FakeProcess


@pytest.fixture
def spawner():
    return _make_spawner
