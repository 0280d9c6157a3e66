"""
Upload signing models
"""
from pydantic import BaseModel, Field
from typing import Optional


class UploadRequest(BaseModel):
    content_type: str = Field(alias="contentType")
    object_key: str = Field(alias="objectKey")
    content_length: Optional[float] = Field(default=None, alias="contentLength")


class SignedUpload(BaseModel):
    upload_url: str = Field(serialization_alias="uploadUrl")
    key: str
    public_url: str = Field(serialization_alias="publicUrl")
    expires_in: int = Field(serialization_alias="expiresIn")
