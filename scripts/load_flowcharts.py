#!/usr/bin/env python3
"""
Load Flowcharts Script

Validates flowchart JSON files and loads the valid ones into the configured store.

Usage:
    # Load into the in-memory store cache (default)
    python scripts/load_flowcharts.py data/flowcharts.json

    # Load into Neo4j
    python scripts/load_flowcharts.py data/flowcharts.json --backend neo4j

    # Only validate
    python scripts/load_flowcharts.py data/*.json --dry-run

Each file holds either one flowchart object or a list of them:
    {"_id": 1, "name": "...", "nodes": [...], "edges": [...]}
"""

import sys
import json
import argparse
from pathlib import Path
from typing import List, Optional, Tuple

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pydantic import ValidationError
from rich.console import Console
from rich.table import Table
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from config.settings import get_settings, STORE_BACKENDS
from src.graph.schema import Flowchart, FlowchartCreate
from src.graph.validator import validate
from src.graph.store import FlowchartStore, DuplicateFlowchartError
from src.graph.neo4j_client import Neo4jClient

console = Console()


def read_flowcharts(path: Path) -> List[dict]:
    """Read one flowchart or a list of flowcharts from a JSON file"""
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    return data if isinstance(data, list) else [data]


def check_flowchart(raw: dict) -> Tuple[str, str, Optional[FlowchartCreate]]:
    """
    Parse and validate one raw flowchart.

    Returns:
        (status, detail, parsed) where status is "ok" or "invalid"
    """
    try:
        parsed = FlowchartCreate.model_validate(raw)
    except ValidationError as e:
        return "invalid", f"{e.error_count()} schema error(s)", None

    if parsed.id is None:
        return "invalid", "Flowchart _id is required.", parsed

    result = validate(parsed.nodes, parsed.edges)
    if not result.valid:
        if result.cycle:
            detail = f"{result.message}: {' -> '.join(result.cycle)}"
        else:
            detail = f"{result.message}: {result.offending_id}"
        return "invalid", detail, parsed

    return "ok", f"{len(parsed.nodes)} nodes, {len(parsed.edges)} edges", parsed


def main():
    parser = argparse.ArgumentParser(description="Validate and load flowchart JSON files")
    parser.add_argument(
        "files",
        nargs="+",
        help="Flowchart JSON files"
    )
    parser.add_argument(
        "--backend",
        choices=STORE_BACKENDS,
        default=None,
        help="Store backend (default: from settings)"
    )
    parser.add_argument(
        "--cache",
        default=None,
        help="Path to cache file for the memory backend (default: from settings)"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate only, do not store anything"
    )

    args = parser.parse_args()

    settings = get_settings()
    backend = args.backend or settings.store_backend
    cache_path = args.cache or settings.flowchart_cache_path

    console.print(f"\n[bold]Flowchart Graph API - Flowchart Loader[/bold]")
    console.print(f"Backend: [cyan]{backend}[/]")

    checked = []
    for name in args.files:
        path = Path(name)
        if not path.exists():
            console.print(f"[red]Error: file not found: {path}[/]")
            sys.exit(1)
        for raw in read_flowcharts(path):
            checked.append((path.name, *check_flowchart(raw)))

    table = Table(title="Validation")
    table.add_column("File")
    table.add_column("_id", justify="right")
    table.add_column("Status")
    table.add_column("Detail")
    for file_name, status, detail, parsed in checked:
        flowchart_id = str(parsed.id) if parsed and parsed.id is not None else "-"
        colour = "green" if status == "ok" else "red"
        table.add_row(file_name, flowchart_id, f"[{colour}]{status}[/]", detail)
    console.print(table)

    valid = [parsed for _, status, _, parsed in checked if status == "ok"]
    if args.dry_run:
        console.print(f"\n[bold]{len(valid)}/{len(checked)} flowcharts valid[/]\n")
        sys.exit(0 if len(valid) == len(checked) else 1)

    if backend == "neo4j":
        if not settings.neo4j_uri:
            console.print("[red]Error: NEO4J_URI not configured in .env[/]")
            sys.exit(1)
        target = Neo4jClient()
        try:
            target.connect()
            target.create_indexes()
        except Exception as e:
            console.print(f"[red]Failed to connect: {e}[/]")
            sys.exit(1)
    else:
        target = FlowchartStore(cache_path=cache_path or None).load()

    loaded = 0
    try:
        for parsed in valid:
            try:
                target.create(Flowchart(id=parsed.id, name=parsed.name, nodes=parsed.nodes, edges=parsed.edges))
                loaded += 1
            except DuplicateFlowchartError:
                console.print(f"[yellow]Skipped {parsed.id}: already exists[/]")
    finally:
        if isinstance(target, Neo4jClient):
            target.close()

    console.print(f"\n[bold green]Loaded {loaded} flowchart(s)[/]\n")


if __name__ == "__main__":
    main()
