"""Shared fixtures for the mod manager tests."""

import os
from pathlib import Path
from typing import Generator, Optional

import pytest
from fastapi.testclient import TestClient

from modmanager.config import PACKAGE_DIR, Settings
from modmanager.main import create_app
from modmanager.models import PlayerCounts, ServerStatus
from modmanager.services.lifecycle import LifecycleController


class FakeProbe:
    def __init__(self, status: ServerStatus) -> None:
        self.status = status
        self.calls = 0

    def probe(self) -> ServerStatus:
        self.calls += 1
        return self.status


class FakeContainer:
    def __init__(self, name: str, image: str, error: Optional[Exception] = None) -> None:
        self.name = name
        self.attrs = {"Config": {"Image": image}}
        self.error = error
        self.restarts = 0

    def restart(self) -> None:
        if self.error is not None:
            raise self.error
        self.restarts += 1


class FakeContainers:
    def __init__(self, containers: list[FakeContainer]) -> None:
        self.containers = containers
        self.list_calls: list[dict] = []

    def list(self, **kwargs) -> list[FakeContainer]:
        self.list_calls.append(kwargs)
        return list(self.containers)

    def get(self, container_id: str) -> FakeContainer:
        from docker.errors import NotFound

        for container in self.containers:
            if container.name == container_id:
                return container
        raise NotFound(f"No such container: {container_id}")


class FakeDockerClient:
    def __init__(self, containers: list[FakeContainer]) -> None:
        self.containers = FakeContainers(containers)
        self.closed = False

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        mods_dir=str(tmp_path / "mods"),
        files_dir=str(tmp_path / "data"),
        mc_host="127.0.0.1",
        mc_port=25565,
        status_timeout_seconds=5.0,
        docker_base_url="unix://var/run/docker.sock",
        docker_timeout_seconds=5,
        mc_container=None,
        mc_image_marker="minecraft",
        static_dir=os.path.join(PACKAGE_DIR, "static"),
        host="127.0.0.1",
        port=3000,
        log_level="INFO",
    )


@pytest.fixture
def mods_dir(settings: Settings) -> Path:
    return Path(settings.mods_dir)


@pytest.fixture
def files_dir(settings: Settings) -> Path:
    return Path(settings.files_dir)


@pytest.fixture
def minecraft_container() -> FakeContainer:
    return FakeContainer("mc", "itzg/minecraft-server:java21")


@pytest.fixture
def docker_client(minecraft_container: FakeContainer) -> FakeDockerClient:
    return FakeDockerClient([FakeContainer("db", "postgres:16"), minecraft_container])


@pytest.fixture
def probe() -> FakeProbe:
    return FakeProbe(
        ServerStatus(
            online=True,
            players=PlayerCounts(online=2, max=20),
            version="1.20.4",
            motd="A Minecraft Server",
            latency=12.5,
        )
    )


@pytest.fixture
def client(
    settings: Settings, docker_client: FakeDockerClient, probe: FakeProbe
) -> Generator[TestClient, None, None]:
    """Test client whose mods and files roots live under tmp_path."""
    controller = LifecycleController(lambda: docker_client)
    app = create_app(settings, lifecycle=controller, status_probe=probe)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def fake_docker():
    """Access to the fake container and client classes from test modules."""

    class Namespace:
        Container = FakeContainer
        Client = FakeDockerClient

    return Namespace
