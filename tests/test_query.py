import itertools

import pytest

from rsearch_core.errors import BuildError
from rsearch_index.query import FLAG_TOKENS, HighlightOptions, Paging, Query, SummaryOptions


@pytest.mark.parametrize(
    "offset, num, expected",
    [
        (0, 10, []),
        (0, 0, ["LIMIT", 0, 0]),
        (10, 10, ["LIMIT", 10, 10]),
        (0, 5, ["LIMIT", 0, 5]),
        (3, 100, ["LIMIT", 3, 100]),
    ],
)
def test_paging_only_serialized_when_not_default(offset, num, expected):
    assert Paging(offset, num).args() == expected


def test_limit_emitted_exactly_once():
    args = Query("hello").limit(5, 20).args()
    assert args.count("LIMIT") == 1
    assert args[:4] == ["hello", "LIMIT", 5, 20]


def test_negative_paging_rejected():
    with pytest.raises(BuildError):
        Paging(-1, 10)


def test_flags_follow_canonical_order():
    q = Query("foo").set_flags(
        with_scores=True, with_payloads=True, in_order=True, no_content=True, verbatim=True,
    )
    assert q.args() == ["foo", "VERBATIM", "NOCONTENT", "INORDER", "WITHPAYLOADS", "WITHSCORES"]


@pytest.mark.parametrize("combo", list(itertools.product([False, True], repeat=len(FLAG_TOKENS))))
def test_every_flag_combination_keeps_order(combo):
    q = Query("x").set_flags(**{name: on for (name, _), on in zip(FLAG_TOKENS, combo)})
    expected = [token for (_, token), on in zip(FLAG_TOKENS, combo) if on]
    assert q.args()[1:] == expected


def test_unknown_flag_rejected():
    with pytest.raises(BuildError):
        Query("x").set_flags(fuzzy=True)


def test_none_collections_omit_clause_and_empty_ones_send_zero_count():
    assert "INKEYS" not in Query("x").args()
    assert "RETURN" not in Query("x").args()

    q = Query("x").set_in_keys().set_return_fields()
    assert q.args() == ["x", "INKEYS", 0, "RETURN", 0]


def test_collections_are_counted_and_flattened():
    q = Query("x").set_in_keys("a", "b").set_return_fields("title")
    assert q.args() == ["x", "INKEYS", 2, "a", "b", "RETURN", 1, "title"]


def test_optional_singular_clauses():
    q = (
        Query("x")
        .set_scorer("DISMAX")
        .set_language("german")
        .set_expander("SBSTEM")
        .set_sort_by("price", ascending=False)
    )
    assert q.args() == [
        "x",
        "SCORER", "DISMAX",
        "LANGUAGE", "german",
        "EXPANDER", "SBSTEM",
        "SORTBY", "price", "DESC",
    ]


def test_highlight_always_sends_two_tags():
    assert HighlightOptions(fields=None, tags=("", "")).args() == ["HIGHLIGHT", "TAGS", "", ""]

    q = Query("x").set_highlight(["title", "body"], "<b>", "</b>")
    assert q.args() == ["x", "HIGHLIGHT", "FIELDS", 2, "title", "body", "TAGS", "<b>", "</b>"]


def test_highlight_requires_tag_pair():
    with pytest.raises(BuildError):
        HighlightOptions(tags=("<b>",))


def test_summarize_defaults_and_options():
    assert SummaryOptions().args() == ["SUMMARIZE"]

    q = Query("x").set_summarize("body", frag_len=20, num_frags=3, separator="...")
    assert q.args() == [
        "x", "SUMMARIZE", "FIELDS", 1, "body", "LEN", 20, "FRAGS", 3, "SEPARATOR", "...",
    ]


def test_full_query_clause_order():
    q = (
        Query("hello world")
        .limit(0, 5)
        .set_flags(verbatim=True, with_scores=True)
        .set_in_keys("doc1")
        .set_payload(b"\x00p")
        .set_sort_by("title")
    )
    q.slop = 1
    assert q.args() == [
        "hello world",
        "LIMIT", 0, 5,
        "VERBATIM", "WITHSCORES",
        "SLOP", 1,
        "INKEYS", 1, "doc1",
        "PAYLOAD", b"\x00p",
        "SORTBY", "title", "ASC",
    ]


def test_args_do_not_mutate_query():
    q = Query("x").set_in_keys("a")
    q.args()
    q.args()
    assert q.in_keys == ["a"]
