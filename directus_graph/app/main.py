from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from directus_graph.app.core.errors import GraphSourceError
from directus_graph.app.core.settings import Settings, get_settings
from directus_graph.app.services.pipeline import GraphSyncPipeline


app = FastAPI(title="Directus Graph Source", version="0.1.0")


class SyncRequest(BaseModel):
    snapshot_path: Optional[str] = None
    download_files: Optional[bool] = None


@app.get("/health")
def health() -> Dict[str, Any]:
    return {"status": "ok"}


@app.post("/sync")
async def sync(req: SyncRequest) -> Dict[str, Any]:
    settings = get_settings()
    if req.snapshot_path:
        settings.source = "snapshot"
        settings.snapshot_path = Path(req.snapshot_path)
    if req.download_files is not None:
        settings.download_files = req.download_files

    pipeline = GraphSyncPipeline(settings, trigger="api")
    try:
        run = await pipeline.run()
        return run.model_dump(mode="json")
    except GraphSourceError as e:
        raise HTTPException(status_code=500, detail=str(e))
    finally:
        await pipeline.close()


async def _run_cli(settings: Settings) -> Dict[str, Any]:
    pipeline = GraphSyncPipeline(settings, trigger="cli")
    try:
        run = await pipeline.run()
        return run.model_dump(mode="json", exclude={"issues"})
    finally:
        await pipeline.close()


def cli() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")

    parser = argparse.ArgumentParser(description="Directus -> node graph sync")
    parser.add_argument("--source", choices=["directus", "snapshot"], default=os.getenv("SOURCE", "directus"))
    parser.add_argument("--snapshot", help="Path to a JSON dump of the Directus responses")
    parser.add_argument("--graph-sink", choices=["json", "neo4j"], default=os.getenv("GRAPH_SINK", "json"))
    parser.add_argument("--run-store", choices=["json", "mongo"], default=os.getenv("RUN_STORE", "json"))
    parser.add_argument("--file-store", choices=["local", "minio"], default=os.getenv("FILE_STORE", "local"))
    parser.add_argument("--no-files", action="store_true", help="Do not download files")
    parser.add_argument("--out-dir", default=os.getenv("OUT_DIR"))
    parser.add_argument("--run-id", default=os.getenv("RUN_ID", ""))
    args = parser.parse_args()

    settings = Settings()
    settings.source = args.source
    settings.graph_sink = args.graph_sink
    settings.run_store = args.run_store
    settings.file_store = args.file_store
    settings.run_id = args.run_id
    if args.snapshot:
        settings.source = "snapshot"
        settings.snapshot_path = Path(args.snapshot)
    if args.no_files:
        settings.download_files = False
    if args.out_dir:
        settings.out_dir = Path(args.out_dir)

    result = asyncio.run(_run_cli(settings))
    print(json.dumps(result, ensure_ascii=False, indent=2))


def serve() -> None:
    uvicorn.run("directus_graph.app.main:app", host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))


if __name__ == "__main__":
    cli()
