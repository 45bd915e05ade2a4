from newsrag.providers.store.sqlite_story_store import SQLiteStoryStore

__all__ = ["SQLiteStoryStore"]
