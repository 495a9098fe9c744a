from .document_registry_port import (
    DealSnapshot,
    DocumentRegistryPort,
    FileRecordData,
    NewFileRecord,
    RegistryError,
)

__all__ = [
    "DealSnapshot",
    "DocumentRegistryPort",
    "FileRecordData",
    "NewFileRecord",
    "RegistryError",
]
