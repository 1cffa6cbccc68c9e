# Recipe association API entry point
import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from .core.ai_client import AIClient
from .errors import RecipeSourceError, StoreError
from .rate_limit import limiter
from .routers.associations import router as associations_router
from .routers.ready import router as ready_router
from .routers.recipes import router as recipes_router
from .services.association_generator import AssociationGenerator
from .services.association_service import AssociationService
from .services.association_store import AssociationStore
from .services.recipe_source import RecipeSourceClient
from .settings import settings

# Configure structured logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger("recipelink")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One store per process, opened on first use
    store = AssociationStore(settings.database_url)
    app.state.store = store
    app.state.association_service = AssociationService(store, AssociationGenerator(AIClient.get_instance()))
    app.state.recipe_source = RecipeSourceClient()
    logger.info("Association service ready (ai_mode=%s)", settings.ai_mode)
    try:
        yield
    finally:
        store.close()


app = FastAPI(title="Recipe Association API", version="0.1.0", lifespan=lifespan)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error(f"Store failure on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": str(exc), "error": "store_error"})


@app.exception_handler(RecipeSourceError)
async def recipe_source_error_handler(request: Request, exc: RecipeSourceError):
    status = 404 if exc.status_code == 404 else 502
    return JSONResponse(status_code=status, content={"detail": str(exc), "error": "recipe_source_error"})


app.include_router(ready_router, prefix="/api", tags=["ready"])
app.include_router(associations_router, prefix="/api", tags=["associations"])
app.include_router(recipes_router, prefix="/api", tags=["recipes"])
