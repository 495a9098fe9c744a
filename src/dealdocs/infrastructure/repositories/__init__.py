from .sqlalchemy_registry import SQLAlchemyDocumentRegistry

__all__ = ["SQLAlchemyDocumentRegistry"]
