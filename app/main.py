import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1.api import api_router
from app.core.config import settings
from app.core.exceptions import BillingError
from app.core.logging import configure_logging
from app.db.mongo import MongoDatabase
from app.utils.month_locks import MonthLockRegistry

load_dotenv()

logger = logging.getLogger(__name__)


def create_app(mongo: MongoDatabase = None) -> FastAPI:
    """Build the API. Tests pass their own ``mongo`` (in-memory client)."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings)
        database = mongo or MongoDatabase(url=settings.MONGODB_URL, name=settings.DATABASE_NAME)
        await database.connect()
        app.state.mongo = database
        app.state.month_locks = MonthLockRegistry()
        logger.info("%s started (%s)", settings.PROJECT_NAME, settings.ENVIRONMENT)
        yield
        await database.close()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.PROJECT_VERSION,
        description=settings.DESCRIPTION,
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(BillingError)
    async def billing_error_handler(request: Request, exc: BillingError):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.get("/")
    async def root():
        return {"message": f"Welcome to {settings.PROJECT_NAME}"}

    app.include_router(api_router, prefix=settings.API_V1_STR)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
