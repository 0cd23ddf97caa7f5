from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from mangum import Mangum

from charity_ledger.api import routers
from charity_ledger.core.config import settings
from charity_ledger.core.logging_config import configure_logging


def create_app() -> FastAPI:
    configure_logging(settings.LOG_LEVEL, service=settings.SERVICE_NAME)

    app = FastAPI(
        title="Charity Ledger API",
        root_path=settings.API_ROOT_PATH
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Malformed or missing request fields are validation errors like empty ones: 400, not 422
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

    @app.get("/")
    def read_root():
        return {"message": "Welcome to the Charity Ledger API"}

    app.include_router(routers.router)
    return app


app = create_app()

handler = Mangum(app)
