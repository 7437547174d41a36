import logging
import os
from typing import Optional

from fastapi import FastAPI, File, Query, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from .config import Settings, load_settings
from .docker_client import create_docker_client
from .models import (
    FileContentResponse,
    FileEntry,
    MessageResponse,
    ModEntry,
    ModUploadResponse,
    PathRequest,
    RenameRequest,
    ServerStatus,
    WriteFileRequest,
)
from .services.errors import ServiceError
from .services.file_manager import FileManager
from .services.lifecycle import ImageMarkerMatcher, LifecycleController
from .services.mod_store import ModStore
from .services.status_probe import StatusProbe

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    lifecycle: Optional[LifecycleController] = None,
    status_probe: Optional[StatusProbe] = None,
) -> FastAPI:
    settings = settings or load_settings()
    mods = ModStore(settings.mods_dir)
    files = FileManager(settings.files_dir)
    mods.ensure_root()
    files.ensure_root()
    probe = status_probe or StatusProbe(
        settings.mc_host, settings.mc_port, timeout=settings.status_timeout_seconds
    )
    controller = lifecycle or LifecycleController(
        lambda: create_docker_client(settings),
        container_id=settings.mc_container,
        matcher=ImageMarkerMatcher(settings.mc_image_marker),
    )

    app = FastAPI(title="Minecraft Mod Manager")
    app.state.settings = settings

    if os.path.isdir(settings.static_dir):
        app.mount("/static", StaticFiles(directory=settings.static_dir), name="static")

        @app.get("/", include_in_schema=False)
        def index() -> FileResponse:
            return FileResponse(os.path.join(settings.static_dir, "index.html"))

    @app.exception_handler(ServiceError)
    def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = "; ".join(str(error.get("msg", "")) for error in exc.errors())
        return JSONResponse(status_code=400, content={"error": f"Invalid request: {details}"})

    @app.get("/api/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/status", response_model=ServerStatus, response_model_exclude_none=True)
    def server_status() -> ServerStatus:
        return probe.probe()

    @app.post("/api/restart", response_model=MessageResponse)
    def restart_server() -> MessageResponse:
        name = controller.restart()
        return MessageResponse(message=f"Restart requested for {name}")

    @app.get("/api/mods", response_model=list[ModEntry])
    def list_mods() -> list[ModEntry]:
        return mods.list_mods()

    @app.post("/api/mods", response_model=ModUploadResponse)
    def upload_mods(mod: Optional[list[UploadFile]] = File(None)) -> ModUploadResponse:
        accepted, rejected = mods.upload(mod or [])
        if len(accepted) == 1:
            message = f"Uploaded {accepted[0]}"
        else:
            message = f"Uploaded {len(accepted)} mods"
        return ModUploadResponse(message=message, uploaded=len(accepted), rejected=rejected)

    @app.delete("/api/mods/{name}", response_model=MessageResponse)
    def delete_mod(name: str) -> MessageResponse:
        mods.delete(name)
        return MessageResponse(message=f"Deleted {name}")

    @app.patch("/api/mods/{name}/toggle", response_model=MessageResponse)
    def toggle_mod(name: str) -> MessageResponse:
        new_name = mods.toggle(name)
        return MessageResponse(message=f"Renamed to {new_name}")

    @app.get("/api/files", response_model=list[FileEntry])
    def list_files(path: str = Query("")) -> list[FileEntry]:
        return files.list_directory(path)

    @app.get("/api/files/read", response_model=FileContentResponse)
    def read_file(path: Optional[str] = Query(None)) -> FileContentResponse:
        name, content = files.read_file(path)
        return FileContentResponse(content=content, name=name)

    @app.put("/api/files/write", response_model=MessageResponse)
    def write_file(request: WriteFileRequest) -> MessageResponse:
        files.write_file(request.path, request.content)
        return MessageResponse(message="File saved")

    @app.post("/api/files/create", response_model=MessageResponse)
    def create_file(request: PathRequest) -> MessageResponse:
        files.create_file(request.path)
        return MessageResponse(message="File created")

    @app.post("/api/files/mkdir", response_model=MessageResponse)
    def create_directory(request: PathRequest) -> MessageResponse:
        files.create_directory(request.path)
        return MessageResponse(message="Directory created")

    @app.post("/api/files/rename", response_model=MessageResponse)
    def rename(request: RenameRequest) -> MessageResponse:
        files.rename(request.old_path, request.new_path)
        return MessageResponse(message="Renamed")

    @app.delete("/api/files", response_model=MessageResponse)
    def delete_path(path: Optional[str] = Query(None)) -> MessageResponse:
        files.delete(path)
        return MessageResponse(message="Deleted")

    @app.post("/api/files/upload", response_model=MessageResponse)
    def upload_files(
        path: str = Query(""),
        file: Optional[list[UploadFile]] = File(None),
    ) -> MessageResponse:
        saved = files.upload(path, file or [])
        return MessageResponse(message=f"Uploaded {len(saved)} file(s)")

    return app
