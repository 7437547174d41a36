from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class MessageResponse(BaseModel):
    message: str


class PlayerCounts(BaseModel):
    online: int
    max: int


class ServerStatus(BaseModel):
    online: bool
    players: Optional[PlayerCounts] = None
    version: Optional[str] = None
    motd: Optional[str] = None
    latency: Optional[float] = None
    error: Optional[str] = None


class ModEntry(BaseModel):
    name: str
    size: int
    enabled: bool
    modified: datetime


class ModUploadResponse(BaseModel):
    message: str
    uploaded: int
    rejected: list[str] = Field(default_factory=list)


class FileEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    is_directory: bool = Field(..., alias="isDirectory")
    size: int
    modified: datetime


class FileContentResponse(BaseModel):
    content: str
    name: str


class PathRequest(BaseModel):
    path: Optional[str] = None


class WriteFileRequest(BaseModel):
    path: Optional[str] = None
    content: Optional[str] = None


class RenameRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    old_path: Optional[str] = Field(None, alias="oldPath")
    new_path: Optional[str] = Field(None, alias="newPath")
