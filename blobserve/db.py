"""
Storage of files in a local sqlite database

Every stored file is a Record in a namespace (see blobserve.sublevel) with its contents split into Chunks.
The Record primary key is an AUTOINCREMENT sequence, so it doubles as the version of the file:
a rewrite deletes the old record and inserts a new one, which always gets a higher sequence number.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from peewee import (
    BlobField,
    CompositeKey,
    DatabaseProxy,
    ForeignKeyField,
    IntegerField,
    Model,
    PeeweeException,
    SqliteDatabase,
    TextField,
)
from playhouse.sqlite_ext import AutoIncrementField

db = DatabaseProxy()


class StoreError(Exception):
    """Something went wrong reading from or writing to the database"""


class Record(Model):
    seq = AutoIncrementField()
    namespace = TextField()
    key = TextField()
    size = IntegerField()

    class Meta:
        database = db
        indexes = ((("namespace", "key"), True),)


class Chunk(Model):
    record = ForeignKeyField(Record, backref="chunks", on_delete="CASCADE")
    idx = IntegerField()
    data = BlobField()

    class Meta:
        database = db
        primary_key = CompositeKey("record", "idx")


def open_database(path: str | Path) -> SqliteDatabase:
    """
    Connect the models to the sqlite database at path, creating the tables if needed
    """
    logging.info(f"Opening database {path}")
    database = SqliteDatabase(str(path), pragmas={"foreign_keys": 1, "journal_mode": "wal"})
    db.initialize(database)
    try:
        db.create_tables([Record, Chunk], safe=True)
    except PeeweeException as e:
        raise StoreError(f"Cannot open database {path}: {e}") from e
    return database


def connected(func, *args):
    """
    Call func with its own connection, closed afterwards.
    Connections are per thread, so every call running in the worker threadpool should go through this.
    """
    try:
        with db.connection_context():
            return func(*args)
    except PeeweeException as e:
        raise StoreError(f"Database error: {e}") from e


def close_database() -> None:
    if db.obj is not None and not db.is_closed():
        db.close()


@asynccontextmanager
async def blob_database(path: str | Path) -> AsyncGenerator[SqliteDatabase, None]:
    """
    Open the database for the duration of the block. Use this once:
        - For running the server: in the FastAPI lifespan
        - For CLI commands: within the CLI command
        - For tests: in the database fixture
    """
    database = open_database(path)
    try:
        yield database
    finally:
        close_database()
