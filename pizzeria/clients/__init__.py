"""
Data-access contracts used by the recommendation generator.

Responsibilities:
- Define the Catalog and Copy operations independently of where data lives.
- Provide in-process (Local) and HTTP (Remote) implementations.
- Pick one implementation per contract when the process starts.
"""
from .base import Catalog, Copy
from .dispatch import Clients, build_clients
from .local import LocalCatalog, LocalCopy
from .remote import RemoteCatalog, RemoteCopy

__all__ = [
    "Catalog",
    "Clients",
    "Copy",
    "LocalCatalog",
    "LocalCopy",
    "RemoteCatalog",
    "RemoteCopy",
    "build_clients",
]
