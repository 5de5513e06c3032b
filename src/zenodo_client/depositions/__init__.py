from .deposition import DEFAULT_UPLOAD_DELAYS, Deposition, FileUploadStatus

__all__ = ["DEFAULT_UPLOAD_DELAYS", "Deposition", "FileUploadStatus"]
