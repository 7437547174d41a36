import os
from dataclasses import dataclass

from dotenv import load_dotenv


load_dotenv()

PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))


def _get_env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value in (None, ""):
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value in (None, ""):
        return default
    try:
        return float(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    mods_dir: str
    files_dir: str
    mc_host: str
    mc_port: int
    status_timeout_seconds: float
    docker_base_url: str
    docker_timeout_seconds: int
    mc_container: str | None
    mc_image_marker: str
    static_dir: str
    host: str
    port: int
    log_level: str


def load_settings() -> Settings:
    return Settings(
        mods_dir=os.path.abspath(os.getenv("MODS_DIR", "mods")),
        files_dir=os.path.abspath(os.getenv("FILES_DIR", "data")),
        mc_host=os.getenv("MC_HOST", "mc"),
        mc_port=_get_env_int("MC_PORT", 25565),
        status_timeout_seconds=_get_env_float("STATUS_TIMEOUT_SECONDS", 5.0),
        docker_base_url=os.getenv("DOCKER_BASE_URL", "unix://var/run/docker.sock"),
        docker_timeout_seconds=_get_env_int("DOCKER_TIMEOUT_SECONDS", 30),
        mc_container=os.getenv("MC_CONTAINER") or None,
        mc_image_marker=os.getenv("MC_IMAGE_MARKER", "minecraft"),
        static_dir=os.path.abspath(os.getenv("STATIC_DIR", os.path.join(PACKAGE_DIR, "static"))),
        host=os.getenv("HOST", "0.0.0.0"),
        port=_get_env_int("PORT", 3000),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
