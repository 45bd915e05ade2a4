from newsrag.providers.vector_index.sqlite_vector_index import SQLiteVectorIndex

__all__ = ["SQLiteVectorIndex"]
