import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn
from config import Settings, settings
from database import Database
from crud.api.v1.endpoints import products
from models import inventory as inventory_models  # registers tables on Base
from schemas.validation import format_errors

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    app_settings = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database = Database(app_settings.database_url)
        database.create_all()
        app.state.database = database
        logger.info("Using database file %s", app_settings.DB_FILE)
        try:
            yield
        finally:
            database.dispose()

    app = FastAPI(title="Inventory API", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def exception_handling(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception:
            logger.exception("Error processing %s %s", request.method, request.url.path)
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal server error"}
            )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"detail": format_errors(exc.errors())})

    app.include_router(products.router, prefix="/api/products", tags=["products"])

    @app.get("/health", tags=["system"])
    def health_check():
        return {"status": "ok", "timestamp": datetime.now().isoformat()}

    return app


app = create_app()


def run():
    uvicorn.run("main:app", host=settings.HOST, port=settings.PORT, reload=False)


if __name__ == '__main__':
    run()
