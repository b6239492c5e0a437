import os
import logging
from fastapi import FastAPI, Depends, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.concurrency import run_in_threadpool
import uvicorn

from .models import Envelope
from .repository import EventLogRepository
from .store import connect_db, get_collection

# =================== CONFIG ===================
MONGO_URI = os.getenv("MONGO_URI", "")
PORT = int(os.getenv("PORT", "8080"))
MONGO_DATABASE = os.getenv("MONGO_DATABASE", "app")
MONGO_COLLECTION = os.getenv("MONGO_COLLECTION", "behaviour_analysis")

# =================== LOGGING ===================
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
logger = logging.getLogger("eventlog")

# =================== FASTAPI APP ===================
app = FastAPI(title="Event Log Record Service")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_repository(request: Request) -> EventLogRepository:
    return request.app.state.repository


def respond(envelope: Envelope) -> JSONResponse:
    return JSONResponse(status_code=envelope.status, content=jsonable_encoder(envelope))


# =================== FASTAPI LIFECYCLE ===================
@app.on_event("startup")
def connect_store():
    """Connect once per process; a StoreConnectionError here aborts startup."""
    if getattr(app.state, "repository", None) is not None:
        # already wired, e.g. by tests
        return
    client = connect_db(MONGO_URI)
    app.state.mongo_client = client
    app.state.repository = EventLogRepository(get_collection(client, MONGO_DATABASE, MONGO_COLLECTION))
    logger.info(f"Using collection {MONGO_DATABASE}.{MONGO_COLLECTION}")


@app.on_event("shutdown")
def shutdown():
    logger.info("🛑 Shutting down event log service.")
    client = getattr(app.state, "mongo_client", None)
    if client is not None:
        client.close()
        app.state.mongo_client = None


# =================== ROUTES ===================

@app.get("/data")
def get_data(eventLogId: str = Query(""), repository: EventLogRepository = Depends(get_repository)):
    return respond(repository.get_one(eventLogId))


@app.get("/data/{eventLogId}")
def get_data_by_path(eventLogId: str, repository: EventLogRepository = Depends(get_repository)):
    return respond(repository.get_one(eventLogId))


@app.get("/alldata")
def get_all_data(repository: EventLogRepository = Depends(get_repository)):
    return respond(repository.get_all())


@app.post("/event/submit")
async def post_data(request: Request, repository: EventLogRepository = Depends(get_repository)):
    """Body is handed to the repository unparsed so malformed JSON yields a 400 envelope."""
    body = await request.body()
    envelope = await run_in_threadpool(repository.create, body)
    return respond(envelope)


def run():
    uvicorn.run("eventlog.main:app", host="0.0.0.0", port=PORT, reload=False)


# =================== MAIN ENTRY ===================
if __name__ == "__main__":
    run()
