import pytest

from rsearch_core.errors import BuildError, MultiError, ServerError, TransportError
from rsearch_core.types import Document
from rsearch_index import reducers
from rsearch_index.aggregate import AggregateQuery
from rsearch_index.client import Client
from rsearch_index.query import Query
from rsearch_index.schema import Schema, text_field


def test_create_index(make_transport):
    transport = make_transport([b"OK"])
    Client("idx", transport).create_index(Schema().add_field(text_field("foo")))
    assert transport.sent == [("FT.CREATE", "idx", "SCHEMA", "foo", "TEXT")]


def test_build_error_happens_before_io(make_transport):
    transport = make_transport()
    client = Client("idx", transport)
    with pytest.raises(BuildError):
        client.dict_add("dict1", [])
    with pytest.raises(BuildError):
        client.dict_del("dict1", [])
    assert transport.acquired == []


def test_dict_add_reports_new_terms(make_transport):
    client = Client("idx", make_transport([1], [0]))
    assert client.dict_add("dict1", ["term1"]) == 1
    assert client.dict_add("dict1", ["term1"]) == 0


def test_dict_dump_empty(make_transport):
    assert Client("idx", make_transport([[]])).dict_dump("dict1") == []


def test_get_and_multi_get(make_transport):
    transport = make_transport(
        [None],
        [[None, [b"foo", b"Hello world"], [b"foo", b"Hello world"]]],
    )
    client = Client("idx", transport)
    assert client.get("dont-exist") is None

    docs = client.multi_get(["dont-exist", "doc-1", "doc-2"])
    assert docs == [
        None,
        Document("doc-1", fields={"foo": "Hello world"}),
        Document("doc-2", fields={"foo": "Hello world"}),
    ]
    assert transport.sent[1] == ("FT.MGET", "idx", "dont-exist", "doc-1", "doc-2")


def test_multi_get_partial_error(make_transport):
    client = Client("idx", make_transport([[Exception("boom"), [b"foo", b"x"]]]))
    with pytest.raises(MultiError) as exc:
        client.multi_get(["a", "b"])
    assert exc.value.results[1].fields == {"foo": "x"}


def test_search(make_transport):
    transport = make_transport([[1, b"doc1", b"0.5", [b"foo", b"bar"]]])
    result = Client("idx", transport).search(Query("bar").set_flags(with_scores=True))
    assert transport.sent == [("FT.SEARCH", "idx", "bar", "WITHSCORES")]
    assert result.total == 1
    assert result.documents == [Document("doc1", 0.5, None, {"foo": "bar"})]


def test_server_error_is_terminal_for_single_ops(make_transport):
    transport = make_transport([ServerError("Unknown Index name")])
    with pytest.raises(ServerError):
        Client("idx", transport).info()
    assert transport.acquired[0].closed
    assert not transport.acquired[0].discarded


def test_transport_error_discards_connection(make_transport):
    transport = make_transport([TransportError("timeout")])
    with pytest.raises(TransportError):
        Client("idx", transport).search(Query("x"))
    assert transport.acquired[0].discarded


def test_index_uses_pipeline(make_transport):
    transport = make_transport([b"OK", ServerError("bad"), b"OK"])
    with pytest.raises(MultiError) as exc:
        Client("idx", transport).index(Document("a"), Document("b"), Document("c"))
    assert [pos for pos, _ in exc.value.failures()] == [1]


def test_aliases_and_drop(make_transport):
    transport = make_transport([b"OK"], [b"OK"], [b"OK"], [b"OK"])
    client = Client("idx", transport)
    client.alias_add("a1")
    client.alias_update("a1")
    client.alias_del("a1")
    client.drop_index(delete_documents=True)
    assert transport.sent == [
        ("FT.ALIASADD", "a1", "idx"),
        ("FT.ALIASUPDATE", "a1", "idx"),
        ("FT.ALIASDEL", "a1"),
        ("FT.DROPINDEX", "idx", "DD"),
    ]


def test_aggregate_without_cursor(make_transport):
    transport = make_transport([[1, [b"n", b"3"]]])
    q = AggregateQuery("*").group_by(["brand"], reducers.count(alias="n"))
    result = Client("idx", transport).aggregate(q)
    assert result.rows == [{"n": "3"}]
    assert result.cursor is None
    assert not result.has_more


def test_cursor_protocol(make_transport):
    transport = make_transport(
        [[[0], 77]],
        [[[5, [b"a", b"1"]], 77]],
        [[[5, [b"a", b"2"]], 0]],
    )
    client = Client("idx", transport)
    q = AggregateQuery("*").with_cursor(count=1)

    first = client.aggregate(q)
    assert first.rows == []
    session = first.cursor
    assert session.has_more

    page = client.cursor_read(session)
    assert page.rows == [{"a": "1"}]
    assert session.has_more

    page = client.cursor_read(session)
    assert page.rows == [{"a": "2"}]
    assert not session.has_more

    with pytest.raises(BuildError):
        client.cursor_read(session)
    assert len(transport.acquired) == 3
    assert transport.sent[1] == ("FT.CURSOR", "READ", "idx", 77, "COUNT", 1)
    assert q.cursor.count == 1


def test_cursor_read_error_exhausts_session(make_transport):
    transport = make_transport([[[0], 9]], [ServerError("Cursor not found")])
    client = Client("idx", transport)
    session = client.aggregate(AggregateQuery("*").with_cursor()).cursor
    with pytest.raises(ServerError):
        client.cursor_read(session)
    assert not session.has_more


def test_aggregate_iter_follows_cursor(make_transport):
    transport = make_transport(
        [[[2, [b"a", b"1"]], 5]],
        [[[2, [b"a", b"2"]], 0]],
    )
    pages = list(Client("idx", transport).aggregate_iter(AggregateQuery("*").with_cursor()))
    assert pages == [[{"a": "1"}], [{"a": "2"}]]


def test_cursor_delete(make_transport):
    transport = make_transport([[[0], 9]], [b"OK"])
    client = Client("idx", transport)
    session = client.aggregate(AggregateQuery("*").with_cursor()).cursor
    client.cursor_delete(session)
    assert transport.sent[1] == ("FT.CURSOR", "DEL", "idx", 9)
    assert not session.has_more


def test_delete_document_and_explain(make_transport):
    transport = make_transport([1], [b"UNION {\n  foo\n}\n"])
    client = Client("idx", transport)
    assert client.delete_document("doc1") is True
    assert client.explain(Query("foo")).startswith("UNION")
