from dotenv import load_dotenv

# Load environment variables before the config module reads them
load_dotenv()

from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from palette_service.api.observability import router as observability_router
from palette_service.api.palettes import router as palettes_router
from palette_service.config import config
from palette_service.schemas import HealthResponse
from palette_service.services.generator import PaletteGenerator
from palette_service.services.store import PaletteStore, create_store
from palette_service.utils.logging import get_logger

VERSION = "1.0.0"


def create_app(store: Optional[PaletteStore] = None,
               generator: Optional[PaletteGenerator] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        store: Palette store to serve; defaults to one built from PALETTE_STORE_PATH
        generator: Palette generator; defaults to config-driven settings
    """
    log = get_logger()

    app = FastAPI(
        title="Palette Service",
        description="Derive color palettes from photos and keep a saved palette list",
        version=VERSION
    )

    app.state.palette_store = store if store is not None else create_store(config.STORE_PATH)
    app.state.palette_generator = generator if generator is not None else PaletteGenerator()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request, exc: StarletteHTTPException):
        # Errors use the same {"message": ...} shape as the generation route
        return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)},
                            headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request, exc: RequestValidationError):
        problems = []
        for error in exc.errors():
            field_path = ".".join(str(part) for part in error.get("loc", ())[1:])
            problems.append(f"{field_path}: {error.get('msg')}" if field_path else str(error.get("msg")))
        return JSONResponse(status_code=422, content={"message": "; ".join(problems) or "Invalid request"})

    app.include_router(palettes_router)
    app.include_router(observability_router)

    @app.get("/healthz", response_model=HealthResponse)
    def health_check():
        """Health check endpoint"""
        return HealthResponse(status="ok", version=VERSION)

    @app.get("/")
    def root():
        """Root endpoint"""
        return {
            "message": "Palette Service API",
            "version": VERSION,
            "docs": "/docs"
        }

    log.info("Palette service initialized",
             extra={"store": type(app.state.palette_store).__name__, "max_edge": config.MAX_EDGE})
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
