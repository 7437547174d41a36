import logging
from typing import Callable, Optional, Sequence

import docker
from docker.errors import DockerException
from docker.errors import NotFound as DockerNotFound

from .errors import ControllerError, NotFound

logger = logging.getLogger(__name__)

ContainerMatcher = Callable[[Sequence[object]], Optional[object]]


def container_image(container) -> str:
    attrs = getattr(container, "attrs", None) or {}
    image = (attrs.get("Config") or {}).get("Image")
    if image:
        return str(image)
    return str(attrs.get("Image") or "")


class ImageMarkerMatcher:
    """Picks the first container whose image name contains ``marker``."""

    def __init__(self, marker: str) -> None:
        self.marker = marker

    def __call__(self, containers: Sequence[object]) -> Optional[object]:
        for container in containers:
            if self.marker and self.marker in container_image(container):
                return container
        return None


class LifecycleController:
    def __init__(
        self,
        client_factory: Callable[[], docker.DockerClient],
        container_id: Optional[str] = None,
        matcher: Optional[ContainerMatcher] = None,
    ) -> None:
        self.client_factory = client_factory
        self.container_id = container_id
        self.matcher = matcher or ImageMarkerMatcher("minecraft")

    def restart(self) -> str:
        """Ask the runtime to restart the server container; returns its name.

        Returns once the restart request is accepted, not once the server is up.
        """
        try:
            client = self.client_factory()
        except DockerException as exc:
            raise ControllerError(f"Docker unavailable: {exc}") from exc

        try:
            container = self._find_container(client)
            container.restart()
        except DockerException as exc:
            raise ControllerError(f"Failed to restart server: {exc}") from exc
        finally:
            client.close()

        name = getattr(container, "name", None) or self.container_id or ""
        logger.info("Restart requested for container %s", name)
        return name

    def _find_container(self, client: docker.DockerClient):
        if self.container_id:
            try:
                return client.containers.get(self.container_id)
            except DockerNotFound as exc:
                raise NotFound(f"Container {self.container_id} not found") from exc

        container = self.matcher(client.containers.list(all=True))
        if container is None:
            raise NotFound("Minecraft container not found")
        return container
