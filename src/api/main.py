"""
FastAPI Application

Main entry point for the Flowchart Graph API.
"""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from typing import List, Union
import logging
import re

from config.settings import get_settings
from ..graph.schema import (
    Edge,
    Flowchart,
    FlowchartCreate,
    FlowchartUpdate,
    ConnectedNodes,
    FlowchartStats,
)
from ..graph.adjacency import UnknownIdentifier
from ..graph.validator import validate
from ..graph.store import FlowchartStore, DuplicateFlowchartError
from ..graph.neo4j_client import Neo4jClient
from ..query.traversal import reachable_from, outgoing_edges
from ..query.stats import compute_stats

# Setup logging
logging.basicConfig(level=getattr(logging, get_settings().log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Flowchart Graph API",
    description="Store flowcharts as validated directed acyclic graphs and query their connectivity",
    version="1.0.0"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Global instances
store: Union[FlowchartStore, Neo4jClient, None] = None

INVALID_ID_MESSAGE = "Invalid _id format. It should be a number."
NOT_FOUND_MESSAGE = "Flowchart not found"
DUPLICATE_MESSAGE = "Duplicate _id. A flowchart with this _id already exists."


# ====================
# Startup/Shutdown
# ====================

@app.on_event("startup")
async def startup():
    """Initialize the flowchart store on startup"""
    global store

    settings = get_settings()

    logger.info("Starting Flowchart Graph API...")

    if settings.store_backend == "neo4j" and settings.neo4j_uri:
        try:
            store = Neo4jClient().connect()
            store.create_indexes()
            logger.info("✓ Connected to Neo4j")
        except Exception as e:
            logger.warning(f"Failed to connect to Neo4j: {e}")
            logger.info("Falling back to in-memory store...")
            store = _load_memory_store(settings)
    else:
        store = _load_memory_store(settings)

    logger.info("Flowchart Graph API ready!")


def _load_memory_store(settings) -> FlowchartStore:
    """Create the in-memory store, restoring the cache when present"""
    store = FlowchartStore(cache_path=settings.flowchart_cache_path or None)
    try:
        store.load()
    except Exception as e:
        logger.warning(f"Failed to load cache: {e}")
    logger.info(f"✓ In-memory store ready ({store.count()} flowcharts)")
    return store


@app.on_event("shutdown")
async def shutdown():
    """Cleanup on shutdown"""
    if isinstance(store, Neo4jClient):
        store.close()
        logger.info("Closed Neo4j connection")


# ====================
# Helpers
# ====================

def _require_store():
    if store is None:
        raise HTTPException(status_code=503, detail="Store not initialized")
    return store


ID_PATTERN = re.compile(r"-?\d+")


def _parse_id(raw: str) -> int:
    # int() alone would also accept "1_0" and padded whitespace
    if not ID_PATTERN.fullmatch(raw):
        raise HTTPException(status_code=400, detail=INVALID_ID_MESSAGE)
    return int(raw)


def _get_or_404(raw_id: str) -> Flowchart:
    flowchart = _require_store().get(_parse_id(raw_id))
    if not flowchart:
        raise HTTPException(status_code=404, detail=NOT_FOUND_MESSAGE)
    return flowchart


def _check_graph(flowchart_id, nodes, edges):
    """Run the validator and turn a failure into a 400"""
    result = validate(nodes, edges)
    if not result.valid:
        logger.info(f"Rejected flowchart {flowchart_id}: {result.message} ({result.offending_id})")
        raise HTTPException(status_code=400, detail=result.message)


# ====================
# API Endpoints
# ====================

@app.get("/")
async def root():
    """API root"""
    return {
        "name": "Flowchart Graph API",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs"
    }


@app.get("/health")
async def health():
    """Health check"""
    return {
        "status": "healthy",
        "store_loaded": store is not None,
        "store_backend": "neo4j" if isinstance(store, Neo4jClient) else "memory",
        "flowcharts": store.count() if store is not None else 0
    }


@app.post("/api/flowcharts", response_model=Flowchart, status_code=201)
async def create_flowchart(request: FlowchartCreate):
    """
    Create a new flowchart.

    The graph must reference only declared nodes and contain no cycle.
    """
    backend = _require_store()

    if request.id is None:
        raise HTTPException(status_code=400, detail="Flowchart _id is required.")

    _check_graph(request.id, request.nodes, request.edges)

    try:
        flowchart = backend.create(Flowchart(
            id=request.id,
            name=request.name,
            nodes=request.nodes,
            edges=request.edges
        ))
        logger.info(f"Created flowchart {flowchart.id}")
        return flowchart
    except DuplicateFlowchartError:
        raise HTTPException(status_code=400, detail=DUPLICATE_MESSAGE)
    except Exception as e:
        logger.error(f"Create error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/api/flowcharts", response_model=List[Flowchart])
async def list_flowcharts():
    """Retrieve a list of all flowcharts"""
    backend = _require_store()

    try:
        return backend.list_all()
    except Exception as e:
        logger.error(f"List error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/api/flowcharts/{flowchart_id}", response_model=Flowchart)
async def get_flowchart(flowchart_id: str):
    """Get a flowchart by _id"""
    return _get_or_404(flowchart_id)


@app.put("/api/flowcharts/{flowchart_id}", response_model=Flowchart)
async def update_flowchart(flowchart_id: str, request: FlowchartUpdate):
    """
    Update an existing flowchart.

    The graph is only replaced (and re-validated) when both nodes and
    edges are supplied.
    """
    flowchart = _get_or_404(flowchart_id)

    changes = {}
    if request.name:
        changes['name'] = request.name
    if request.nodes is not None and request.edges is not None:
        _check_graph(flowchart.id, request.nodes, request.edges)
        changes['nodes'] = request.nodes
        changes['edges'] = request.edges

    try:
        updated = store.replace(flowchart.model_copy(update=changes))
        logger.info(f"Updated flowchart {updated.id}")
        return updated
    except KeyError:
        raise HTTPException(status_code=404, detail=NOT_FOUND_MESSAGE)
    except Exception as e:
        logger.error(f"Update error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.delete("/api/flowcharts/{flowchart_id}")
async def delete_flowchart(flowchart_id: str):
    """Delete a flowchart by _id"""
    backend = _require_store()

    if not backend.delete(_parse_id(flowchart_id)):
        raise HTTPException(status_code=404, detail=NOT_FOUND_MESSAGE)
    logger.info(f"Deleted flowchart {flowchart_id}")
    return {"message": "Flowchart deleted"}


@app.get("/api/flowcharts/{flowchart_id}/edges/{node_id}/outgoing", response_model=List[Edge])
async def get_outgoing_edges(flowchart_id: str, node_id: str):
    """Get all outgoing edges for a given node"""
    flowchart = _get_or_404(flowchart_id)
    return outgoing_edges(flowchart.edges, node_id)


@app.get("/api/flowcharts/{flowchart_id}/connected/{node_id}", response_model=ConnectedNodes)
async def get_connected_nodes(flowchart_id: str, node_id: str):
    """
    Get all nodes reachable from a node (directly or indirectly).

    An unknown node has nothing reachable and yields an empty list.
    """
    flowchart = _get_or_404(flowchart_id)

    try:
        connected = reachable_from(flowchart.nodes, flowchart.edges, node_id)
    except UnknownIdentifier as e:
        logger.error(f"Stored flowchart {flowchart.id} is inconsistent: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    return ConnectedNodes(connected_nodes=connected)


@app.get("/api/flowcharts/{flowchart_id}/stats", response_model=FlowchartStats)
async def get_flowchart_stats(flowchart_id: str):
    """Get flowchart statistics"""
    flowchart = _get_or_404(flowchart_id)

    try:
        return compute_stats(flowchart)
    except Exception as e:
        logger.error(f"Stats error: {e}")
        raise HTTPException(status_code=500, detail=str(e))
