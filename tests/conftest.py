"""
Pytest configuration and fixtures for testing.

This file provides reusable test fixtures for:
- A manual clock standing in for the event loop timers
- Fake Verify / Resend / Login / Navigate collaborators
- A FastAPI test client wired to those fakes
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

from otpflow.api import deps
from otpflow.main import app
from otpflow.schemas.otp import Role, VerifyResponse
from otpflow.services.registry import SessionRegistry
from otpflow.services.verification import VerificationController


class FakeTimer:
    def __init__(self, when, callback):
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Scheduler whose time only moves when a test calls `advance`."""

    def __init__(self):
        self.now = 0.0
        self._timers = []

    def call_later(self, delay, callback):
        timer = FakeTimer(self.now + delay, callback)
        self._timers.append(timer)
        return timer

    def advance(self, seconds):
        target = self.now + seconds
        while True:
            due = [t for t in self._timers if not t.cancelled and t.when <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.when)
            self._timers.remove(timer)
            self.now = timer.when
            timer.callback()
        self.now = target

    @property
    def pending(self):
        return [t for t in self._timers if not t.cancelled]


class FakeAuthAPI:
    """Records Verify/Resend calls; can fail or hold a call open until released."""

    def __init__(self):
        self.verify_calls = []
        self.resend_calls = []
        self.verify_result = VerifyResponse(message="Email verified successfully", token="t1")
        self.verify_error = None
        self.resend_error = None
        self.verify_gate = None
        self.resend_gate = None
        self.verify_started = asyncio.Event()
        self.resend_started = asyncio.Event()

    async def verify_otp(self, email, code, role):
        self.verify_calls.append((email, code, role))
        self.verify_started.set()
        if self.verify_gate is not None:
            await self.verify_gate.wait()
        if self.verify_error is not None:
            raise self.verify_error
        return self.verify_result

    async def resend_otp(self, email, role):
        self.resend_calls.append((email, role))
        self.resend_started.set()
        if self.resend_gate is not None:
            await self.resend_gate.wait()
        if self.resend_error is not None:
            raise self.resend_error


class FakeSessionStore:
    def __init__(self):
        self.logins = []
        self.error = None

    async def login(self, response):
        self.logins.append(response)
        if self.error is not None:
            raise self.error
        return f"auth:session:{response.token}"


class FakeNavigator:
    def __init__(self):
        self.paths = []

    def __call__(self, path):
        self.paths.append(path)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def auth_api():
    return FakeAuthAPI()


@pytest.fixture
def session_store():
    return FakeSessionStore()


@pytest.fixture
def navigator():
    return FakeNavigator()


@pytest.fixture
def make_controller(auth_api, session_store, navigator, scheduler):
    """Build a started controller wired to the fake collaborators."""

    def _make(role=Role.USER, email="jane@example.com", **kwargs):
        controller = VerificationController(
            email,
            role,
            verify=auth_api.verify_otp,
            resend=auth_api.resend_otp,
            login=session_store.login,
            navigate=navigator,
            scheduler=scheduler,
            **kwargs,
        )
        controller.start()
        return controller

    return _make


@pytest.fixture
def registry():
    return SessionRegistry()


@pytest.fixture
def client(registry, auth_api, session_store, scheduler):
    """
    FastAPI test client with collaborators replaced by fakes.
    """
    app.dependency_overrides[deps.get_registry] = lambda: registry
    app.dependency_overrides[deps.get_auth_api] = lambda: auth_api
    app.dependency_overrides[deps.get_session_store] = lambda: session_store
    app.dependency_overrides[deps.get_scheduler] = lambda: scheduler

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
