from __future__ import annotations

import pytest

from src.hrms.hrms.auth.tokens import TokenService
from src.hrms.hrms.core.enums import Role
from src.hrms.hrms.main import create_app
from tests.fakes import FakeClock, World


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def tokens():
    return TokenService("test-access-secret", "test-refresh-secret")


@pytest.fixture
def world(tokens, clock):
    return World(tokens=tokens, clock=clock)


@pytest.fixture
def admin(world):
    return world.hire("ADMIN001", role=Role.ADMIN, first_name="Ada")


@pytest.fixture
def hr(world):
    return world.hire("HR001", role=Role.HR, first_name="Hana")


@pytest.fixture
def employee(world):
    return world.hire("EMP0001", first_name="Evan", last_name="Cole")


@pytest.fixture
def app(world):
    app = create_app(container=world.container, settings_module="config.testing")
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def client(app):
    return app.test_client()
