import logging

from mcstatus import JavaServer

from ..models import PlayerCounts, ServerStatus

logger = logging.getLogger(__name__)


class StatusProbe:
    """Single Server List Ping against the managed server.

    ``probe`` never raises: an unreachable server is reported as
    ``online=False`` with the failure text in ``error``.
    """

    def __init__(self, host: str, port: int, timeout: float = 5.0) -> None:
        self.host = host
        self.port = port
        self.timeout = timeout

    def probe(self) -> ServerStatus:
        try:
            server = JavaServer(self.host, port=self.port, timeout=self.timeout)
            status = server.status(tries=1)
        except Exception as exc:
            logger.warning("Status query to %s:%s failed: %s", self.host, self.port, exc)
            return ServerStatus(online=False, error=str(exc) or exc.__class__.__name__)

        return ServerStatus(
            online=True,
            players=PlayerCounts(online=status.players.online, max=status.players.max),
            version=status.version.name,
            motd=status.motd.to_plain(),
            latency=status.latency,
        )
