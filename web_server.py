from fastapi import FastAPI, UploadFile, File, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
import logging
import os

from tracker_ingest import DEFAULT_MAX_DEPTH, IngestionError, ingest, ingest_base64
from tracker_ingest.bencode import check_max_depth

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 10 * 1024 * 1024


class Base64Torrent(BaseModel):
    torrent: str


def _env_flag(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def create_app(max_upload_bytes=None, max_depth=None, require_pieces=None):
    if max_upload_bytes is None:
        max_upload_bytes = int(os.environ.get("TRACKER_INGEST_MAX_UPLOAD_BYTES", MAX_UPLOAD_BYTES))
    if max_depth is None:
        max_depth = int(os.environ.get("TRACKER_INGEST_MAX_DEPTH", DEFAULT_MAX_DEPTH))
    check_max_depth(max_depth)
    if require_pieces is None:
        require_pieces = _env_flag("TRACKER_INGEST_REQUIRE_PIECES")

    app = FastAPI(title="TrackerIngestAPI")

    app.add_middleware(
        CORSMiddleware, #upload form is served from another origin
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def _ingest(parse, payload, source):
        try:
            torrent = parse(payload, max_depth=max_depth, require_pieces=require_pieces)
        except IngestionError as e:
            logger.warning("Rejected torrent %s: %s", source, e)
            raise HTTPException(status_code=400, detail=str(e))

        logger.info("Accepted torrent %s: %r %s", source, torrent.name, torrent.info_hash_v1_hex)
        return {"success": True, "data": torrent.to_dict()}

    @app.get("/api/health")
    async def health():
        return {"status": "ok"}

    @app.post("/api/torrents/upload")
    async def upload_torrent(file: UploadFile = File(...)):
        content = await file.read()
        if len(content) > max_upload_bytes:
            raise HTTPException(status_code=413, detail="Torrent file too large")
        return _ingest(ingest, content, file.filename)

    @app.post("/api/torrents/parse")
    async def parse_torrent(body: Base64Torrent):
        if len(body.torrent) > max_upload_bytes * 4 // 3 + 4:
            raise HTTPException(status_code=413, detail="Torrent file too large")
        return _ingest(ingest_base64, body.torrent, "(base64)")

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host="localhost", port=8000)
