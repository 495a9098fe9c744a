"""Document API request/response schemas

Field names on the wire are camelCase (dealId, fileId, ...).
"""

from pydantic import BaseModel, ConfigDict, Field


class UploadResponse(BaseModel):
    """Response for a stored upload"""
    model_config = ConfigDict(populate_by_name=True)

    message: str = Field("File uploaded successfully", description="Outcome message")
    file_id: str = Field(..., alias="fileId", description="Identifier of the new file record")
    url: str = Field(..., description="Retrievable reference returned by object storage")


class DocumentEntryResponse(BaseModel):
    """One document in the caller's cross-deal listing"""
    model_config = ConfigDict(populate_by_name=True)

    deal_id: str = Field(..., alias="dealId")
    file_id: str = Field(..., alias="fileId")
    filename: str
    content_type: str = Field(..., alias="contentType")
    size: int = Field(..., description="File size in bytes")
    uploaded_at: str = Field(..., alias="uploadedAt", description="UTC upload time, ISO-8601")
    uploaded_by: str = Field(..., alias="uploadedBy")
    download_path: str = Field(..., alias="downloadPath")


class ErrorResponse(BaseModel):
    """Structured error body"""
    error: str = Field(..., description="Error code (e.g., not_found, forbidden)")
    message: str = Field(..., description="Human-readable error message")
