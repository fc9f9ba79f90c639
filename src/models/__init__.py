"""Data models for the Imgur upload client."""

from .upload import DeleteResult, ErrorData, SuccessData, UploadRequest, UploadResult

__all__ = ["DeleteResult", "ErrorData", "SuccessData", "UploadRequest", "UploadResult"]
