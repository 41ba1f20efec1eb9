# Persistence: ORM models, engine/session scope, port and SQL adapter
from .corpus import Corpus, CorpusItem, CorpusLevel, load_corpus
from .database import create_db_engine, init_db, make_session_factory, session_scope
from .models import Base
from .ports import ProgressStore
from .sql_store import SqlProgressStore

__all__ = [
    "Base",
    "Corpus",
    "CorpusItem",
    "CorpusLevel",
    "load_corpus",
    "create_db_engine",
    "init_db",
    "make_session_factory",
    "session_scope",
    "ProgressStore",
    "SqlProgressStore",
]
