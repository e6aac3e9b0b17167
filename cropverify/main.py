from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from cropverify.api.routes import router
from cropverify.api.admin_routes import router as admin_router
from cropverify.observability.logging import log
from cropverify.settings import settings
from cropverify.store.workflow_repo import repo


@asynccontextmanager
async def lifespan(app: FastAPI):
    log(event="boot", lookupStrategy=settings.LOOKUP_STRATEGY, maxPhotos=settings.MAX_PHOTOS,
        cameraEnabled=settings.CAMERA_ENABLED, locale=settings.DEFAULT_LOCALE)
    yield
    # Release every camera handle still held by an open wizard
    closed = repo.close_all()
    log(event="shutdown", closedWorkflows=closed)


app = FastAPI(title="Crop Verification Capture API", lifespan=lifespan)

origins = [x.strip() for x in settings.CORS_ORIGINS.split(",") if x.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)
app.include_router(admin_router)


@app.get("/")
def root():
    return {
        "status": "ok",
        "message": "Crop verification API is running. POST /workflows with {identifier} to begin.",
    }


@app.get("/health")
def health():
    return {"status": "ok"}


@app.exception_handler(Exception)
async def universal_exception_handler(request: Request, exc: Exception):
    # Workflow failures are already mapped to view state; anything reaching here is a bug
    log(event="unhandled_exception", path=request.url.path, errorType=type(exc).__name__, error=str(exc)[:500])
    return JSONResponse(
        status_code=500,
        content={"status": "error", "message": "Something went wrong. Please try again."},
    )
