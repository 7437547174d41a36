import docker

from .config import Settings


def create_docker_client(settings: Settings) -> docker.DockerClient:
    # Connect to the Docker socket; the timeout bounds every API call, restart included
    return docker.DockerClient(
        base_url=settings.docker_base_url,
        timeout=settings.docker_timeout_seconds,
    )
