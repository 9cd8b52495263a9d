from infrastructure.repositories.sqlite_document_store import SqliteDocumentStore

__all__ = ["SqliteDocumentStore"]
