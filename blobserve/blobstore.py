"""
Reading and writing files in a sublevel

All database access happens in the worker threadpool, so none of these methods block the event loop.
"""

import inspect
import logging
from typing import Any, Callable, NamedTuple, Optional

from peewee import PeeweeException
from starlette.concurrency import run_in_threadpool

from blobserve.config import get_settings
from blobserve.db import Chunk, Record, StoreError, connected, db
from blobserve.sublevel import Sublevel

FileId = str | int
Callback = Callable[[Optional[Exception]], Any]


class InvalidFileId(ValueError):
    pass


def check_file_id(id: FileId) -> None:
    """Files must be reachable by url, so ids cannot be empty or contain a '/'"""
    if not str(id):
        raise InvalidFileId("File ids cannot be empty")
    if "/" in str(id):
        raise InvalidFileId(f"File id {id!r} cannot contain a '/'")


class BlobMeta(NamedTuple):
    version: int
    size: int


class BlobStore:
    def __init__(self, level: Sublevel):
        self.level = level

    def __repr__(self) -> str:
        return f"BlobStore({self.level!r})"

    def _get_record(self, id: FileId) -> Record | None:
        try:
            return Record.get_or_none((Record.namespace == self.level.key) & (Record.key == str(id)))
        except PeeweeException as e:
            raise StoreError(f"Cannot read {id!r} from {self.level!r}: {e}") from e

    def _commit(self, id: FileId, chunks: list[bytes]) -> int:
        size = sum(len(c) for c in chunks)
        try:
            with db.atomic():
                Record.delete().where((Record.namespace == self.level.key) & (Record.key == str(id))).execute()
                record = Record.create(namespace=self.level.key, key=str(id), size=size)
                if chunks:
                    Chunk.insert_many(
                        [{"record": record.seq, "idx": i, "data": data} for i, data in enumerate(chunks)]
                    ).execute()
        except PeeweeException as e:
            raise StoreError(f"Cannot write {id!r} to {self.level!r}: {e}") from e
        return record.seq

    async def exists(self, id: FileId) -> bool:
        return await self.stat(id) is not None

    async def stat(self, id: FileId) -> BlobMeta | None:
        """Get the version and size of a file without reading it, or None if it does not exist"""
        record = await run_in_threadpool(connected, self._get_record, id)
        if record is None:
            return None
        return BlobMeta(version=record.seq, size=record.size)

    def create_read_stream(self, id: FileId, version: int | None = None) -> "BlobReader":
        return BlobReader(self, id, version)

    def create_write_stream(self, id: FileId, callback: Callback | None = None) -> "BlobWriter":
        return BlobWriter(self, id, callback)

    async def read(self, id: FileId) -> bytes | None:
        """Read a whole file into memory, returns None if it does not exist"""
        async with self.create_read_stream(id) as reader:
            data = b"".join([chunk async for chunk in reader])
        return data if reader.meta is not None else None

    async def write(self, id: FileId, data: bytes, callback: Callback | None = None) -> int | None:
        """
        Store data under id, returning the new version.
        If a callback is given, it is called exactly once with the error (or None on success),
        and errors are not raised.
        """
        writer = self.create_write_stream(id, callback)
        writer.write(data)
        return await writer.close()


class BlobWriter:
    """
    Buffers written data and stores it when closed.

    The (optional) callback is called exactly once, with None if the data was stored or with the error otherwise.
    """

    def __init__(self, store: BlobStore, id: FileId, callback: Callback | None = None):
        check_file_id(id)
        self.store = store
        self.id = id
        self.callback = callback
        self.version: int | None = None
        self._chunks: list[bytes] = []
        self._buffer = bytearray()
        self._closed = False
        self._called = False

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, data: bytes) -> None:
        if self._closed:
            raise ValueError(f"Cannot write to closed stream for {self.id!r}")
        chunk_size = get_settings().chunk_size
        self._buffer.extend(data)
        while len(self._buffer) >= chunk_size:
            self._chunks.append(bytes(self._buffer[:chunk_size]))
            del self._buffer[:chunk_size]

    async def close(self) -> int | None:
        if self._closed:
            return self.version
        self._closed = True
        if self._buffer:
            self._chunks.append(bytes(self._buffer))
            self._buffer.clear()
        try:
            self.version = await run_in_threadpool(connected, self.store._commit, self.id, self._chunks)
        except Exception as e:
            await self._done(e)
            if self.callback is None:
                raise
            return None
        finally:
            self._chunks = []
        logging.info(f"Stored {self.id!r} in {self.store.level!r}, version {self.version}")
        await self._done(None)
        return self.version

    async def abort(self, error: Exception) -> None:
        """Discard the written data, reporting error to the callback"""
        self._closed = True
        self._chunks = []
        self._buffer.clear()
        await self._done(error)

    async def _done(self, error: Exception | None) -> None:
        if self.callback is None or self._called:
            return
        self._called = True
        result = self.callback(error)
        if inspect.isawaitable(result):
            await result

    async def __aenter__(self) -> "BlobWriter":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc is not None:
            await self.abort(exc)
        else:
            await self.close()


class BlobReader:
    """
    Single pass async iterator over the chunks of a stored file.

    Yields nothing if the file does not exist. If version is given, only that version is read,
    and a StoreError is raised if it was replaced before or while reading.
    """

    def __init__(self, store: BlobStore, id: FileId, version: int | None = None):
        self.store = store
        self.id = id
        self.version = version
        self.meta: BlobMeta | None = None
        self._opened = False
        self._closed = False
        self._idx = 0
        self._read = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def _open(self) -> None:
        if self.version is None:
            record = self.store._get_record(self.id)
            if record is not None:
                self.meta = BlobMeta(version=record.seq, size=record.size)
        else:
            try:
                record = Record.get_or_none(Record.seq == self.version)
            except PeeweeException as e:
                raise StoreError(f"Cannot read {self.id!r} from {self.store.level!r}: {e}") from e
            if record is None:
                raise StoreError(f"Version {self.version} of {self.id!r} in {self.store.level!r} no longer exists")
            if (record.namespace, record.key) != (self.store.level.key, str(self.id)):
                raise StoreError(f"Version {self.version} does not belong to {self.id!r} in {self.store.level!r}")
            self.meta = BlobMeta(version=record.seq, size=record.size)

    def _next_chunk(self) -> bytes | None:
        if self.meta is None or self._read >= self.meta.size:
            return None
        try:
            chunk = Chunk.get_or_none((Chunk.record == self.meta.version) & (Chunk.idx == self._idx))
        except PeeweeException as e:
            raise StoreError(f"Cannot read {self.id!r} from {self.store.level!r}: {e}") from e
        if chunk is None:
            raise StoreError(f"Version {self.meta.version} of {self.id!r} was replaced while reading")
        self._idx += 1
        data = bytes(chunk.data)
        self._read += len(data)
        return data

    def __aiter__(self) -> "BlobReader":
        return self

    async def __anext__(self) -> bytes:
        if self._closed:
            raise StopAsyncIteration
        if not self._opened:
            self._opened = True
            await run_in_threadpool(connected, self._open)
        data = await run_in_threadpool(connected, self._next_chunk)
        if data is None:
            await self.aclose()
            raise StopAsyncIteration
        return data

    async def aclose(self) -> None:
        self._closed = True

    async def __aenter__(self) -> "BlobReader":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
