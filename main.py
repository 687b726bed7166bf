import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import settings
from services.firebase_service import initialize_firebase

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Needed for ID token checks and the firebase storage backend
    initialize_firebase()
    yield

app = FastAPI(
    lifespan=lifespan,
    title="Tent & Lantern Packing API",
    description="Packing list generation and checklist storage for camping trips.",
    version="0.1.0",
)

# Origins come from CORS_ORIGINS; the defaults cover the Expo web build and local dev.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/", tags=["Root"])
def read_root():
    return {"status": "ok", "service": "packing"}

# Include the routers
from api.routers import templates, packing

# The templates router goes first so /packing/templates isn't read as a list id
app.include_router(templates.router, prefix="/api")
app.include_router(packing.router, prefix="/api")


def main():
    """Run the API server."""
    import argparse

    import uvicorn

    parser = argparse.ArgumentParser(description="Tent & Lantern Packing API")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind to")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args()

    uvicorn.run("main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
