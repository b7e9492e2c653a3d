import logging
from typing import Optional, Sequence

from rsearch_core.errors import MultiError, SearchError, ServerError, TransportError
from rsearch_core.protocols import Transport
from rsearch_core.types import Document
from rsearch_core.validators import validate_document

from .commands import ADD
from .indexing import IndexingOptions, add_document_args

logger = logging.getLogger(__name__)


class BulkIndexer:
    """
    Pipelined FT.ADD over a single connection.

    All commands are queued, flushed once, then exactly one reply per
    document is read back in send order. A rejected document only fills its
    own slot in the resulting ``MultiError``; the rest of the batch is still
    drained.
    """

    __slots__ = ("transport", "index_name")

    def __init__(self, *, transport: Transport, index_name: str):
        self.transport = transport
        self.index_name = index_name

    def index(
        self,
        docs: Sequence[Document],
        options: Optional[IndexingOptions] = None,
    ) -> None:
        """
        Raises ``MultiError`` if any document failed, ``TransportError`` if
        the flush failed for the whole batch.
        """
        if not docs:
            return

        conn = self.transport.acquire()
        discard = False
        try:
            # 1. Queue every command. A send failure breaks the
            #    one-send-one-reply pairing, so the batch stops here.
            for pos, doc in enumerate(docs):
                try:
                    validate_document(doc)
                    conn.send(ADD, *add_document_args(self.index_name, doc, options))
                except SearchError as e:
                    discard = True
                    merr = MultiError(len(docs))
                    merr[pos] = e
                    logger.warning(
                        "Aborting batch of %d on %s: send failed at position %d: %s",
                        len(docs), self.index_name, pos, e,
                    )
                    raise merr from e

            # 2. Push everything out in one write
            try:
                conn.flush()
            except TransportError:
                discard = True
                raise

            # 3. Drain exactly len(docs) replies
            merr = None
            for pos in range(len(docs)):
                try:
                    conn.receive()
                except ServerError as e:
                    if merr is None:
                        merr = MultiError(len(docs))
                    merr[pos] = e
                except TransportError:
                    discard = True
                    raise
        finally:
            if discard:
                conn.discard()
            else:
                conn.close()

        if merr is not None:
            logger.warning(
                "%d of %d documents rejected by %s",
                len(merr.failures()), len(docs), self.index_name,
            )
            raise merr
        logger.debug("Indexed %d documents into %s", len(docs), self.index_name)
