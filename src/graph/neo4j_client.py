"""
Neo4j Client

Stores flowcharts in a Neo4j graph database.
Use this for production deployments.

Layout:
    (:Flowchart {id, name, created_at, updated_at})
        -[:HAS_NODE]->(:FlowNode {flowchart_id, id, label, position})
    (:FlowNode)-[:FLOWS_TO {position}]->(:FlowNode)
"""

from datetime import datetime
from typing import Optional, List, Dict, Any
from neo4j import GraphDatabase, Driver
from contextlib import contextmanager
import logging

from config.settings import get_settings
from .schema import Flowchart
from .store import DuplicateFlowchartError, utcnow

logger = logging.getLogger(__name__)


class Neo4jClient:
    """
    Neo4j flowchart store.

    Usage:
        client = Neo4jClient()
        client.connect()
        client.create_indexes()

        client.create(flowchart)
        flowchart = client.get(1)

        client.close()
    """

    def __init__(self, uri: str = None, user: str = None, password: str = None):
        """
        Initialize Neo4j client.

        Args:
            uri: Neo4j connection URI (defaults to settings)
            user: Neo4j username (defaults to settings)
            password: Neo4j password (defaults to settings)
        """
        settings = get_settings()
        self.uri = uri or settings.neo4j_uri
        self.user = user or settings.neo4j_user
        self.password = password or settings.neo4j_password
        self.driver: Optional[Driver] = None

    def connect(self) -> "Neo4jClient":
        """Establish connection to Neo4j"""
        if not self.uri:
            raise ValueError("NEO4J_URI not configured")

        self.driver = GraphDatabase.driver(
            self.uri,
            auth=(self.user, self.password)
        )

        # Test connection
        with self.driver.session() as session:
            session.run("RETURN 1")

        logger.info(f"Connected to Neo4j at {self.uri}")
        return self

    def close(self):
        """Close the Neo4j connection"""
        if self.driver:
            self.driver.close()
            self.driver = None

    @contextmanager
    def session(self):
        """Get a Neo4j session"""
        if not self.driver:
            self.connect()
        session = self.driver.session()
        try:
            yield session
        finally:
            session.close()

    # ==========================================
    # SCHEMA CREATION
    # ==========================================

    def create_indexes(self):
        """Create constraints and indexes used by flowchart lookups"""
        with self.session() as session:
            session.run("""
                CREATE CONSTRAINT flowchart_id IF NOT EXISTS
                FOR (f:Flowchart) REQUIRE f.id IS UNIQUE
            """)
            session.run("""
                CREATE INDEX flow_node_owner IF NOT EXISTS
                FOR (n:FlowNode) ON (n.flowchart_id, n.id)
            """)

        logger.info("Created Neo4j indexes")

    # ==========================================
    # WRITES
    # ==========================================

    def create(self, flowchart: Flowchart) -> Flowchart:
        """Insert a new flowchart; raises DuplicateFlowchartError when _id is taken"""
        now = utcnow()
        stored = flowchart.model_copy(update={'created_at': now, 'updated_at': now})

        with self.session() as session:
            # Uncommitted transactions roll back on exit
            with session.begin_transaction() as tx:
                existing = tx.run("""
                    MATCH (f:Flowchart {id: $id})
                    RETURN count(f) as count
                """, id=stored.id).single()['count']
                if existing:
                    raise DuplicateFlowchartError(stored.id)

                tx.run("""
                    CREATE (f:Flowchart {id: $id, name: $name,
                                         created_at: $created_at, updated_at: $updated_at})
                """, id=stored.id, name=stored.name,
                    created_at=stored.created_at.isoformat(),
                    updated_at=stored.updated_at.isoformat())
                self._write_graph(tx, stored)
                tx.commit()

        return stored

    def replace(self, flowchart: Flowchart) -> Flowchart:
        """Overwrite an existing flowchart's name and graph"""
        existing = self.get(flowchart.id)
        if existing is None:
            raise KeyError(flowchart.id)

        stored = flowchart.model_copy(update={
            'created_at': existing.created_at,
            'updated_at': utcnow()
        })

        with self.session() as session:
            with session.begin_transaction() as tx:
                tx.run("""
                    MATCH (f:Flowchart {id: $id})-[:HAS_NODE]->(n:FlowNode)
                    DETACH DELETE n
                """, id=stored.id)
                tx.run("""
                    MATCH (f:Flowchart {id: $id})
                    SET f.name = $name, f.updated_at = $updated_at
                """, id=stored.id, name=stored.name, updated_at=stored.updated_at.isoformat())
                self._write_graph(tx, stored)
                tx.commit()

        return stored

    def delete(self, flowchart_id: int) -> bool:
        """Delete a flowchart and its nodes; returns False when it did not exist"""
        with self.session() as session:
            record = session.run("""
                MATCH (f:Flowchart {id: $id})
                OPTIONAL MATCH (f)-[:HAS_NODE]->(n:FlowNode)
                WITH f, collect(n) as nodes, count(DISTINCT f) as found
                FOREACH (n IN nodes | DETACH DELETE n)
                DETACH DELETE f
                RETURN found
            """, id=flowchart_id).single()
        return bool(record and record['found'])

    def _write_graph(self, tx, flowchart: Flowchart):
        """Create FlowNode nodes and FLOWS_TO relationships inside tx, keeping declared order"""
        nodes = [
            {'id': node.id, 'label': node.label, 'position': position}
            for position, node in enumerate(flowchart.nodes)
        ]
        edges = [
            {'source': edge.source, 'target': edge.target, 'position': position}
            for position, edge in enumerate(flowchart.edges)
        ]

        tx.run("""
            MATCH (f:Flowchart {id: $id})
            UNWIND $nodes as node
            CREATE (f)-[:HAS_NODE]->(:FlowNode {flowchart_id: $id, id: node.id,
                                                label: node.label, position: node.position})
        """, id=flowchart.id, nodes=nodes)
        tx.run("""
            UNWIND $edges as edge
            MATCH (s:FlowNode {flowchart_id: $id, id: edge.source})
            MATCH (t:FlowNode {flowchart_id: $id, id: edge.target})
            CREATE (s)-[:FLOWS_TO {position: edge.position}]->(t)
        """, id=flowchart.id, edges=edges)

    # ==========================================
    # QUERIES
    # ==========================================

    def get(self, flowchart_id: int) -> Optional[Flowchart]:
        """Get a flowchart by _id"""
        with self.session() as session:
            header = session.run("""
                MATCH (f:Flowchart {id: $id})
                RETURN f.id as id, f.name as name,
                       f.created_at as created_at, f.updated_at as updated_at
            """, id=flowchart_id).single()
            if not header:
                return None

            nodes = session.run("""
                MATCH (:Flowchart {id: $id})-[:HAS_NODE]->(n:FlowNode)
                RETURN n.id as id, n.label as label
                ORDER BY n.position
            """, id=flowchart_id)
            edges = session.run("""
                MATCH (:Flowchart {id: $id})-[:HAS_NODE]->(s:FlowNode)-[r:FLOWS_TO]->(t:FlowNode)
                RETURN s.id as source, t.id as target
                ORDER BY r.position
            """, id=flowchart_id)

            return self._to_flowchart(
                dict(header),
                [dict(record) for record in nodes],
                [dict(record) for record in edges]
            )

    def list_all(self) -> List[Flowchart]:
        """All flowcharts ordered by _id"""
        with self.session() as session:
            result = session.run("""
                MATCH (f:Flowchart)
                OPTIONAL MATCH (f)-[:HAS_NODE]->(n:FlowNode)
                WITH f, n ORDER BY n.position
                WITH f, collect(n {.id, .label}) as nodes
                OPTIONAL MATCH (f)-[:HAS_NODE]->(s:FlowNode)-[r:FLOWS_TO]->(t:FlowNode)
                WITH f, nodes, s, r, t ORDER BY r.position
                WITH f, nodes,
                     collect(CASE WHEN r IS NULL THEN NULL
                                  ELSE {source: s.id, target: t.id} END) as edges
                RETURN f.id as id, f.name as name,
                       f.created_at as created_at, f.updated_at as updated_at,
                       nodes, edges
                ORDER BY f.id
            """)

            return [
                self._to_flowchart(dict(record), record['nodes'], record['edges'])
                for record in result
            ]

    def count(self) -> int:
        """Number of stored flowcharts"""
        with self.session() as session:
            return session.run("MATCH (f:Flowchart) RETURN count(f) as count").single()['count']

    @staticmethod
    def _to_flowchart(header: Dict[str, Any], nodes: List[Dict], edges: List[Dict]) -> Flowchart:
        return Flowchart(
            id=header['id'],
            name=header['name'],
            nodes=nodes,
            edges=edges,
            created_at=datetime.fromisoformat(header['created_at']) if header.get('created_at') else None,
            updated_at=datetime.fromisoformat(header['updated_at']) if header.get('updated_at') else None,
        )
