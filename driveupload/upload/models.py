"""Pydantic models for object metadata exchanged with the upload endpoint."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DriveFile(BaseModel):
    """Metadata record of a remote object.

    Sent as the JSON body when negotiating a session and returned by the
    server once the last chunk has been accepted. Unknown fields returned by
    the server are preserved.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str | None = None
    name: str | None = None
    mime_type: str | None = Field(default=None, alias="mimeType")
    size: int | None = None
    md5_checksum: str | None = Field(default=None, alias="md5Checksum")
    parents: list[str] | None = None
    modified_time: str | None = Field(default=None, alias="modifiedTime")

    def to_request_json(self) -> dict[str, Any]:
        """Serialise using wire names, leaving out unset fields."""
        return self.model_dump(by_alias=True, exclude_none=True)
