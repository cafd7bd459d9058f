from .auth import resolve_token
from .client import GranolaClient, page_documents

__all__ = ["GranolaClient", "page_documents", "resolve_token"]
