"""
Index a batch of products, search them, then page through an aggregation
with a cursor.

Requires a Redis server with the search module loaded:

    docker run -p 6379:6379 redislabs/redisearch:latest
"""
import logging

from rsearch_core.errors import MultiError, ServerError
from rsearch_core.types import Document
from rsearch_index import reducers
from rsearch_index.aggregate import AggregateQuery
from rsearch_index.client import Client
from rsearch_index.config import RedisConfig
from rsearch_index.query import Query
from rsearch_index.schema import Schema, sortable_numeric_field, tag_field, text_field
from rsearch_index.transport import RedisTransport

logging.basicConfig(level=logging.INFO)


def main() -> None:
    transport = RedisTransport(RedisConfig.from_env())
    client = Client("products", transport)

    schema = (
        Schema()
        .add_field(text_field("title", weight=2.0))
        .add_field(tag_field("brand"))
        .add_field(sortable_numeric_field("price"))
    )
    try:
        client.drop_index(delete_documents=True)
    except ServerError:
        pass  # first run
    client.create_index(schema)

    docs = [
        Document(f"product:{i}")
        .set("title", f"wireless headphones model {i}")
        .set("brand", ["acme", "globex", "initech"][i % 3])
        .set("price", 20 + i)
        for i in range(30)
    ]
    try:
        client.index(*docs)
    except MultiError as merr:
        for pos, err in merr.failures():
            print(f"{docs[pos].id} rejected: {err}")

    result = client.search(Query("headphones").limit(0, 3).set_sort_by("price", ascending=False))
    print(f"{result.total} matches, top 3:")
    for doc in result.documents:
        print(" ", doc.id, doc.fields.get("price"))

    agg = (
        AggregateQuery("*")
        .group_by(["brand"], reducers.count(alias="n"), reducers.avg("price", alias="avg_price"))
        .sort_by(("avg_price", False))
        .with_cursor(count=1)
    )
    for page in client.aggregate_iter(agg):
        for row in page:
            print(row)

    transport.close()


if __name__ == "__main__":
    main()
