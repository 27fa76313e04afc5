from filevault.models.file import File
from filevault.models.refresh_token import RefreshToken
from filevault.models.user import User

__all__ = [
    "File",
    "RefreshToken",
    "User",
]
