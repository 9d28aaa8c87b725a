"""Test fixtures for pvdashboard tests."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator

import pytest
import pytest_asyncio
import structlog
from asgi_lifespan import LifespanManager
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from kubernetes_asyncio import client as kubernetes_client
from safir.logging import LogLevel, Profile

from pvdashboard.config import Config
from pvdashboard.constants import ROOT_LOGGER
from pvdashboard.factory import Factory
from pvdashboard.main import create_app

from .support.constants import TEST_BASE_URL
from .support.kubernetes import MockDashboardKubernetesApi, patch_kubernetes


@pytest.fixture
def config() -> Config:
    """Construct default configuration for tests."""
    return Config(
        log_level=LogLevel.DEBUG,
        log_profile=Profile.development,
        kubernetes_in_cluster=True,
    )


@pytest_asyncio.fixture
async def app(
    config: Config, mock_kubernetes: MockDashboardKubernetesApi
) -> AsyncIterator[FastAPI]:
    """Return a configured test application.

    Wraps the application in a lifespan manager so that startup and shutdown
    events are sent during test execution. The mock Kubernetes API is
    populated with the standard test data before startup, since that is when
    the snapshot is gathered.
    """
    await mock_kubernetes.load_for_test("standard")
    app = create_app(config)
    async with LifespanManager(app):
        yield app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Return an ``httpx.AsyncClient`` configured to talk to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url=TEST_BASE_URL
    ) as client:
        yield client


@pytest.fixture
def factory(
    config: Config, mock_kubernetes: MockDashboardKubernetesApi
) -> Factory:
    """Create a component factory for tests."""
    logger = structlog.get_logger(ROOT_LOGGER)
    return Factory(config, kubernetes_client.ApiClient(), logger)


@pytest.fixture
def mock_kubernetes() -> Iterator[MockDashboardKubernetesApi]:
    yield from patch_kubernetes()
