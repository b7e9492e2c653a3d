import logging
from typing import Any, Iterator, Optional, Sequence

from rsearch_core.errors import BuildError, SearchError, TransportError
from rsearch_core.protocols import Transport
from rsearch_core.types import Document, IndexInfo, SearchResult
from rsearch_core.validators import validate_ids, validate_terms

from . import commands
from .aggregate import AggregateQuery, AggregateResult, CursorSession
from .decoder import (
    decode_aggregate,
    decode_document,
    decode_documents,
    decode_info,
    decode_int,
    decode_search,
    decode_terms,
    to_str,
)
from .indexer import BulkIndexer
from .indexing import IndexingOptions
from .query import Query
from .schema import Schema

logger = logging.getLogger(__name__)


class Client:
    """
    Typed client for one full-text index.

    Every call acquires its own connection from the transport and gives it
    back before returning, so a Client can be shared between threads.
    Cursor sessions cannot.
    """

    def __init__(self, index_name: str, transport: Transport):
        if not index_name:
            raise ValueError("index_name must be a non-empty string")
        self.index_name = index_name
        self.transport = transport
        self._indexer = BulkIndexer(transport=transport, index_name=index_name)

    # ----------------------------
    # Command execution
    # ----------------------------

    def _execute(self, command: str, *args: Any) -> Any:
        conn = self.transport.acquire()
        discard = False
        try:
            conn.send(command, *args)
            conn.flush()
            return conn.receive()
        except TransportError:
            discard = True
            raise
        finally:
            if discard:
                conn.discard()
            else:
                conn.close()

    # ----------------------------
    # Index management
    # ----------------------------

    def create_index(self, schema: Schema) -> None:
        args = schema.args()
        logger.debug("Creating index %s with %d fields", self.index_name, len(schema.fields))
        self._execute(commands.CREATE, self.index_name, *args)

    def drop_index(self, delete_documents: bool = False) -> None:
        args: list[Any] = [self.index_name]
        if delete_documents:
            args.append("DD")
        self._execute(commands.DROPINDEX, *args)

    def info(self) -> IndexInfo:
        return decode_info(self._execute(commands.INFO, self.index_name))

    # ----------------------------
    # Write path
    # ----------------------------

    def index(self, *docs: Document) -> None:
        self._indexer.index(docs)

    def index_options(self, options: IndexingOptions, *docs: Document) -> None:
        self._indexer.index(docs, options)

    def delete_document(self, doc_id: str, delete_hash: bool = False) -> bool:
        args: list[Any] = [self.index_name, doc_id]
        if delete_hash:
            args.append("DD")
        return decode_int(self._execute(commands.DEL, *args)) == 1

    # ----------------------------
    # Read path
    # ----------------------------

    def get(self, doc_id: str) -> Optional[Document]:
        return decode_document(doc_id, self._execute(commands.GET, self.index_name, doc_id))

    def multi_get(self, ids: Sequence[str]) -> list[Optional[Document]]:
        """
        Result is aligned with ``ids``; missing documents are ``None``.
        """
        validate_ids(ids)
        reply = self._execute(commands.MGET, self.index_name, *ids)
        return decode_documents(ids, reply)

    def search(self, query: Query) -> SearchResult:
        return decode_search(self._execute(commands.SEARCH, self.index_name, *query.args()), query)

    def explain(self, query: Query) -> str:
        return to_str(self._execute(commands.EXPLAIN, self.index_name, query.raw))

    # ----------------------------
    # Aggregation
    # ----------------------------

    def aggregate(self, query: AggregateQuery) -> AggregateResult:
        """
        Run the pipeline. When the query asks for a cursor the result carries
        a ``CursorSession`` to pass to ``cursor_read``.
        """
        with_cursor = query.cursor is not None
        reply = self._execute(commands.AGGREGATE, self.index_name, *query.args())
        total, rows, cursor_id = decode_aggregate(reply, with_cursor)
        session = None
        if with_cursor:
            session = CursorSession(self.index_name, cursor_id, query.cursor.count)
        return AggregateResult(total, rows, session)

    def cursor_read(self, session: CursorSession) -> AggregateResult:
        """
        Read the next page and advance ``session``. Any failure exhausts the
        session; the handle is never retried.
        """
        if not session.has_more:
            raise BuildError("Cursor is exhausted")
        try:
            reply = self._execute(commands.CURSOR, *session.read_args())
            total, rows, cursor_id = decode_aggregate(reply, with_cursor=True)
        except SearchError:
            session.exhaust()
            raise
        session.handle = cursor_id
        return AggregateResult(total, rows, session)

    def cursor_delete(self, session: CursorSession) -> None:
        if not session.has_more:
            return
        try:
            self._execute(commands.CURSOR, *session.delete_args())
        finally:
            session.exhaust()

    def aggregate_iter(self, query: AggregateQuery) -> Iterator[list[dict[str, Any]]]:
        """
        Yield row pages, following the cursor until the server reports it
        exhausted. Without a cursor, yields a single page.
        """
        result = self.aggregate(query)
        yield result.rows
        session = result.cursor
        while session is not None and session.has_more:
            yield self.cursor_read(session).rows

    # ----------------------------
    # Aliases
    # ----------------------------

    def alias_add(self, alias: str) -> None:
        self._execute(commands.ALIASADD, alias, self.index_name)

    def alias_update(self, alias: str) -> None:
        self._execute(commands.ALIASUPDATE, alias, self.index_name)

    def alias_del(self, alias: str) -> None:
        self._execute(commands.ALIASDEL, alias)

    # ----------------------------
    # Dictionaries
    # ----------------------------

    def dict_add(self, dictionary: str, terms: Sequence[str]) -> int:
        """
        Returns the number of terms that were not already present.
        """
        validate_terms(terms)
        return decode_int(self._execute(commands.DICTADD, dictionary, *terms))

    def dict_del(self, dictionary: str, terms: Sequence[str]) -> int:
        validate_terms(terms)
        return decode_int(self._execute(commands.DICTDEL, dictionary, *terms))

    def dict_dump(self, dictionary: str) -> list[str]:
        return decode_terms(self._execute(commands.DICTDUMP, dictionary))
