# circularbuild/main.py
import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import create_async_engine

from circularbuild.api import (
    account,
    chats,
    listings,
    maintenance,
    news,
    organizations,
    wishlist,
)
from circularbuild.config import AppConfig
from circularbuild.domain.errors import DomainError
from circularbuild.infrastructure.database import create_database
from circularbuild.infrastructure.email_sender import ChatEmailNotifier, SmtpEmailSender
from circularbuild.infrastructure.event_dispatcher import EventDispatcher
from circularbuild.infrastructure.event_handlers import EventHandlers
from circularbuild.infrastructure.geocoding import MapboxGeocoder
from circularbuild.infrastructure.redis_client import RedisClient
from circularbuild.infrastructure.security import SecurityService


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts) or "Invalid request."


class Application:
    def __init__(self, config: AppConfig):
        self.config = config
        self.logger = self.setup_logger()
        engine = create_async_engine(config.DATABASE_URL, echo=False)
        self.database = create_database(engine)
        self.redis_client = RedisClient(config.REDIS_HOST, config.REDIS_PORT, self.logger)
        self.event_dispatcher = EventDispatcher(self.logger)
        self.security_service = SecurityService(config)
        self.geocoder = MapboxGeocoder(
            config.MAPBOX_TOKEN, self.logger, config.GEOCODER_TIMEOUT_SECONDS
        )
        self.email_sender = SmtpEmailSender(config, self.logger)
        self.chat_notifier = ChatEmailNotifier(self.email_sender, config.SITE_URL)
        self.event_handlers = EventHandlers(self.redis_client)

        # Register event handlers
        if config.REALTIME_ENABLED:
            self.event_dispatcher.register(
                "MessageCreated", self.event_handlers.publish_message_created
            )
            self.event_dispatcher.register(
                "ChatsClosed", self.event_handlers.publish_chats_closed
            )
            self.event_dispatcher.register(
                "UnreadStateUpdated", self.event_handlers.publish_unread_state_updated
            )
        self.event_dispatcher.register(
            "MessageCreated", self.chat_notifier.notify_message_created
        )

    @asynccontextmanager
    async def lifespan(self, app: FastAPI):
        await self.database.connect()
        if self.config.REALTIME_ENABLED:
            await self.redis_client.connect()
        yield
        await self.database.disconnect()
        await self.redis_client.disconnect()

    def setup_logger(self):
        logger = logging.getLogger("CircularBuildAPI")
        logger.setLevel(logging.INFO)

        if not logger.handlers:
            c_handler = logging.StreamHandler(sys.stdout)
            formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )
            c_handler.setFormatter(formatter)
            logger.addHandler(c_handler)

        return logger

    def create_app(self) -> FastAPI:
        app = FastAPI(
            title=self.config.PROJECT_NAME,
            version=self.config.PROJECT_VERSION,
            description=self.config.PROJECT_DESCRIPTION,
            openapi_url=f"{self.config.API_V1_STR}/openapi.json",
            lifespan=self.lifespan,
        )

        app.state.config = self.config
        app.state.security_service = self.security_service
        app.state.event_dispatcher = self.event_dispatcher
        app.state.database = self.database
        app.state.logger = self.logger
        app.state.geocoder = self.geocoder

        api = self.config.API_V1_STR
        app.include_router(listings.router, prefix=f"{api}/listings", tags=["listings"])
        app.include_router(chats.router, prefix=f"{api}/chats", tags=["chats"])
        app.include_router(wishlist.router, prefix=f"{api}/wishlist", tags=["wishlist"])
        app.include_router(account.router, prefix=f"{api}/account", tags=["account"])
        app.include_router(account.me_router, prefix=f"{api}/me", tags=["account"])
        app.include_router(news.router, prefix=f"{api}/news", tags=["news"])
        app.include_router(
            organizations.router, prefix=f"{api}/organizations", tags=["organizations"]
        )
        app.include_router(
            maintenance.router, prefix=f"{api}/maintenance", tags=["maintenance"]
        )

        logger = self.logger

        @app.exception_handler(DomainError)
        async def domain_exception_handler(request: Request, exc: DomainError):
            if exc.status_code >= 500:
                logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
            return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

        @app.exception_handler(RequestValidationError)
        async def validation_exception_handler(request: Request, exc: RequestValidationError):
            return JSONResponse(status_code=400, content={"detail": _validation_message(exc)})

        @app.exception_handler(Exception)
        async def global_exception_handler(request: Request, exc: Exception):
            logger.exception(f"Unhandled error on {request.method} {request.url.path}")
            return JSONResponse(
                status_code=500,
                content={"detail": "An unexpected error occurred."},
            )

        @app.get("/")
        async def root():
            return {"message": f"Welcome to the {self.config.PROJECT_NAME}"}

        return app


def create():
    config = AppConfig()
    application = Application(config)
    app = application.create_app()
    application.logger.info("Application created and configured")

    return app


app = create()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=8000)
