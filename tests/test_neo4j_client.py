"""
Tests for the Neo4j flowchart store (fake driver, no database)
"""

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.graph.schema import Flowchart
from src.graph.store import DuplicateFlowchartError
from src.graph.neo4j_client import Neo4jClient


class FakeResult:
    def __init__(self, records):
        self.records = records

    def single(self):
        return self.records[0] if self.records else None

    def __iter__(self):
        return iter(self.records)


class FakeTransaction:
    """Collects queries; only committed ones reach the driver's log"""

    def __init__(self, session):
        self.session = session
        self.pending = []
        self.committed = False
        self.rolled_back = False

    def run(self, query, **params):
        self.pending.append((" ".join(query.split()), params))
        return FakeResult(self.session.responder(query, params))

    def commit(self):
        self.session.calls.extend(self.pending)
        self.committed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if not self.committed:
            self.rolled_back = True
        return False


class FakeSession:
    def __init__(self, driver):
        self.driver = driver
        self.responder = driver.responder
        self.calls = driver.calls

    def run(self, query, **params):
        self.calls.append((" ".join(query.split()), params))
        return FakeResult(self.responder(query, params))

    def begin_transaction(self):
        tx = FakeTransaction(self)
        self.driver.transactions.append(tx)
        return tx

    def close(self):
        pass


class FakeDriver:
    def __init__(self, responder):
        self.responder = responder
        self.calls = []
        self.transactions = []

    def session(self):
        return FakeSession(self)

    def close(self):
        pass


def make_client(responder):
    client = Neo4jClient(uri="bolt://fake:7687", user="neo4j", password="secret")
    client.driver = FakeDriver(responder)
    return client


def make_flowchart():
    return Flowchart(
        id=1,
        name="Test Flowchart",
        nodes=[{"id": "1", "label": "Start"}, {"id": "2", "label": "End"}],
        edges=[{"source": "1", "target": "2"}]
    )


class TestNeo4jClient:
    """Tests for Neo4jClient"""

    def test_connect_requires_uri(self):
        client = Neo4jClient()
        client.uri = None
        with pytest.raises(ValueError):
            client.connect()

    def test_create_duplicate(self):
        client = make_client(lambda query, params: [{"count": 1}] if "count(f)" in query else [])
        with pytest.raises(DuplicateFlowchartError):
            client.create(make_flowchart())

    def test_create_writes_ordered_graph(self):
        client = make_client(lambda query, params: [{"count": 0}] if "count(f)" in query else [])
        stored = client.create(make_flowchart())

        assert stored.created_at is not None
        queries = [params for _, params in client.driver.calls]
        node_call = next(p for p in queries if "nodes" in p)
        edge_call = next(p for p in queries if "edges" in p)
        assert node_call["nodes"] == [
            {"id": "1", "label": "Start", "position": 0},
            {"id": "2", "label": "End", "position": 1},
        ]
        assert edge_call["edges"] == [{"source": "1", "target": "2", "position": 0}]

    def test_get_missing(self):
        client = make_client(lambda query, params: [])
        assert client.get(42) is None

    def test_get_builds_flowchart(self):
        def responder(query, params):
            if "f.name as name" in query:
                return [{
                    "id": 1,
                    "name": "Test Flowchart",
                    "created_at": "2023-08-10T10:00:00+00:00",
                    "updated_at": "2023-08-10T10:00:00+00:00",
                }]
            if "n.label as label" in query:
                return [{"id": "1", "label": "Start"}, {"id": "2", "label": "End"}]
            if "t.id as target" in query:
                return [{"source": "1", "target": "2"}]
            return []

        flowchart = make_client(responder).get(1)
        assert flowchart.id == 1
        assert [node.id for node in flowchart.nodes] == ["1", "2"]
        assert flowchart.edges[0].target == "2"
        assert flowchart.created_at.year == 2023

    def test_delete_missing(self):
        client = make_client(lambda query, params: [])
        assert client.delete(1) is False

    def test_delete_found(self):
        client = make_client(lambda query, params: [{"found": 1}])
        assert client.delete(1) is True

    def test_count(self):
        client = make_client(lambda query, params: [{"count": 3}])
        assert client.count() == 3

    def test_create_commits_single_transaction(self):
        client = make_client(lambda query, params: [{"count": 0}] if "count(f)" in query else [])
        client.create(make_flowchart())
        assert len(client.driver.transactions) == 1
        assert client.driver.transactions[0].committed

    def test_create_duplicate_rolls_back(self):
        client = make_client(lambda query, params: [{"count": 1}] if "count(f)" in query else [])
        with pytest.raises(DuplicateFlowchartError):
            client.create(make_flowchart())
        assert client.driver.transactions[0].rolled_back
        assert client.driver.calls == []


STORED_HEADER = {
    "id": 1,
    "name": "Test Flowchart",
    "created_at": "2023-08-10T10:00:00+00:00",
    "updated_at": "2023-08-10T10:00:00+00:00",
}


def stored_responder(query, params):
    """Answers the reads issued by get() for flowchart 1"""
    if "f.name as name" in query:
        return [STORED_HEADER] if params.get("id") == 1 else []
    if "n.label as label" in query:
        return [{"id": "1", "label": "Start"}, {"id": "2", "label": "End"}]
    if "t.id as target" in query:
        return [{"source": "1", "target": "2"}]
    return []


class TestNeo4jReplace:
    """Tests for Neo4jClient.replace"""

    def make_update(self):
        return Flowchart(
            id=1,
            name="Renamed",
            nodes=[{"id": "1", "label": "Start"}, {"id": "2", "label": "Middle"}, {"id": "3", "label": "End"}],
            edges=[{"source": "1", "target": "2"}, {"source": "2", "target": "3"}]
        )

    def test_replace_rewrites_graph(self):
        client = make_client(stored_responder)
        updated = client.replace(self.make_update())

        assert updated.name == "Renamed"
        assert updated.created_at.isoformat() == STORED_HEADER["created_at"]
        assert updated.updated_at > updated.created_at

        tx = client.driver.transactions[0]
        assert tx.committed
        queries = [query for query, _ in tx.pending]
        assert any("DETACH DELETE n" in query for query in queries)
        assert any("SET f.name = $name" in query for query in queries)

        params = [p for _, p in tx.pending]
        node_call = next(p for p in params if "nodes" in p)
        edge_call = next(p for p in params if "edges" in p)
        assert [node["position"] for node in node_call["nodes"]] == [0, 1, 2]
        assert edge_call["edges"] == [
            {"source": "1", "target": "2", "position": 0},
            {"source": "2", "target": "3", "position": 1},
        ]

    def test_replace_missing(self):
        client = make_client(lambda query, params: [])
        with pytest.raises(KeyError):
            client.replace(self.make_update())
        assert client.driver.transactions == []

    def test_failed_rewrite_leaves_nothing_committed(self):
        def responder(query, params):
            if "UNWIND $nodes" in query:
                raise RuntimeError("write failed")
            return stored_responder(query, params)

        client = make_client(responder)
        with pytest.raises(RuntimeError):
            client.replace(self.make_update())

        tx = client.driver.transactions[0]
        assert tx.rolled_back
        assert not tx.committed
        assert not any("DETACH DELETE" in query or "SET f.name" in query
                       for query, _ in client.driver.calls)


class TestNeo4jListAll:
    """Tests for Neo4jClient.list_all"""

    def test_single_query_in_id_order(self):
        records = [
            dict(STORED_HEADER, nodes=[{"id": "1", "label": "Start"}, {"id": "2", "label": "End"}],
                 edges=[{"source": "1", "target": "2"}]),
            dict(STORED_HEADER, id=2, name="Empty", nodes=[], edges=[]),
        ]
        client = make_client(lambda query, params: records if "ORDER BY f.id" in query else [])

        flowcharts = client.list_all()
        assert [fc.id for fc in flowcharts] == [1, 2]
        assert [node.id for node in flowcharts[0].nodes] == ["1", "2"]
        assert flowcharts[0].edges[0].target == "2"
        assert flowcharts[1].nodes == []
        assert len(client.driver.calls) == 1

    def test_empty(self):
        client = make_client(lambda query, params: [])
        assert client.list_all() == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
