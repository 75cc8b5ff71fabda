# backend/main.py
from fastapi import FastAPI, APIRouter, Depends, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.orm import Session
from typing import List, Optional, Union
from datetime import datetime, timezone
from contextlib import asynccontextmanager
import logging

from config import Settings
from database import create_datastore, get_db, get_optional_db
from errors import MarketplaceError, ConfigurationError, NotFoundError, ValidationError, upstream_errors
from schemas import (
    UserCreate, UserUpdate, UserResponse,
    ServiceCreate, ServiceUpdate, ServiceFilters, ServiceResponse,
    BookingCreate, BookingUpdate, BookingResponse,
    MessageCreate, MessageResponse, AssistantTurnRequest,
    ChatRequest, ChatResponse, SuggestRequest, SuggestResponse,
    DeleteResponse, HealthResponse
)
from ai_service import AIService
from user_service import UserService
from catalog_service import CatalogService, DEMO_CATALOG, filter_demo_catalog
from booking_service import BookingService
from message_service import MessageService, DEFAULT_LIMIT

logger = logging.getLogger(__name__)

router = APIRouter()


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_ai_service(request: Request) -> AIService:
    return request.app.state.ai_service


def utc_timestamp() -> datetime:
    return datetime.now(timezone.utc)


# Users
@router.get("/users", response_model=Union[UserResponse, List[UserResponse]])
def get_users(user_id: Optional[str] = Query(None, alias="id"), db: Session = Depends(get_db)):
    with upstream_errors("Failed to fetch users"):
        if user_id:
            return UserService(db).get(user_id)
        return UserService(db).list()


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(user: UserCreate, db: Session = Depends(get_db)):
    with upstream_errors("Failed to create user"):
        return UserService(db).create(user)


@router.put("/users", response_model=UserResponse)
def update_user(
    user: UserUpdate,
    user_id: Optional[str] = Query(None, alias="id"),
    db: Session = Depends(get_db)
):
    if not user_id:
        raise ValidationError("User ID is required")
    with upstream_errors("Failed to update user"):
        return UserService(db).update(user_id, user)


@router.delete("/users", response_model=DeleteResponse)
def delete_user(user_id: Optional[str] = Query(None, alias="id"), db: Session = Depends(get_db)):
    if not user_id:
        raise ValidationError("User ID is required")
    with upstream_errors("Failed to delete user"):
        UserService(db).delete(user_id)
    return {"message": "User deleted successfully"}


# Services
@router.get("/services", response_model=Union[ServiceResponse, List[ServiceResponse]])
def get_services(
    service_id: Optional[str] = Query(None, alias="id"),
    category: Optional[str] = None,
    location: Optional[str] = None,
    min_price: Optional[float] = Query(None, alias="minPrice", allow_inf_nan=False),
    max_price: Optional[float] = Query(None, alias="maxPrice", allow_inf_nan=False),
    rating: Optional[float] = Query(None, allow_inf_nan=False),
    provider_id: Optional[str] = Query(None, alias="providerId"),
    settings: Settings = Depends(get_settings),
    db: Optional[Session] = Depends(get_optional_db)
):
    filters = ServiceFilters(
        category=category,
        location=location,
        min_price=min_price,
        max_price=max_price,
        rating=rating,
        provider_id=provider_id
    )

    if settings.demo_mode:
        if service_id:
            for service in DEMO_CATALOG:
                if service["id"] == service_id:
                    return service
            raise NotFoundError("Service not found")
        return filter_demo_catalog(filters)

    if db is None:
        raise ConfigurationError("Database not configured")

    with upstream_errors("Failed to fetch services"):
        if service_id:
            return CatalogService(db).get(service_id)
        return CatalogService(db).list(filters)


@router.post("/services", response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
def create_service(service: ServiceCreate, db: Session = Depends(get_db)):
    with upstream_errors("Failed to create service"):
        return CatalogService(db).create(service)


@router.put("/services", response_model=ServiceResponse)
def update_service(
    service: ServiceUpdate,
    service_id: Optional[str] = Query(None, alias="id"),
    db: Session = Depends(get_db)
):
    if not service_id:
        raise ValidationError("Service ID is required")
    with upstream_errors("Failed to update service"):
        return CatalogService(db).update(service_id, service)


@router.delete("/services", response_model=DeleteResponse)
def delete_service(service_id: Optional[str] = Query(None, alias="id"), db: Session = Depends(get_db)):
    if not service_id:
        raise ValidationError("Service ID is required")
    with upstream_errors("Failed to delete service"):
        CatalogService(db).delete(service_id)
    return {"message": "Service deleted successfully"}


# Bookings
@router.get("/bookings", response_model=Union[BookingResponse, List[BookingResponse]])
def get_bookings(
    booking_id: Optional[str] = Query(None, alias="id"),
    user_id: Optional[str] = Query(None, alias="userId"),
    provider_id: Optional[str] = Query(None, alias="providerId"),
    booking_status: Optional[str] = Query(None, alias="status"),
    db: Session = Depends(get_db)
):
    with upstream_errors("Failed to fetch bookings"):
        if booking_id:
            return BookingService(db).get(booking_id)
        return BookingService(db).list(customer_id=user_id, provider_id=provider_id, status=booking_status)


@router.post("/bookings", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(booking: BookingCreate, db: Session = Depends(get_db)):
    with upstream_errors("Failed to create booking"):
        return BookingService(db).create(booking)


@router.put("/bookings", response_model=BookingResponse)
def update_booking(
    booking: BookingUpdate,
    booking_id: Optional[str] = Query(None, alias="id"),
    db: Session = Depends(get_db)
):
    if not booking_id:
        raise ValidationError("Booking ID is required")
    with upstream_errors("Failed to update booking"):
        return BookingService(db).update(booking_id, booking)


@router.delete("/bookings", response_model=DeleteResponse)
def delete_booking(booking_id: Optional[str] = Query(None, alias="id"), db: Session = Depends(get_db)):
    if not booking_id:
        raise ValidationError("Booking ID is required")
    with upstream_errors("Failed to delete booking"):
        BookingService(db).delete(booking_id)
    return {"message": "Booking deleted successfully"}


# Messages
@router.get("/messages", response_model=List[MessageResponse])
def get_messages(
    chat_id: Optional[str] = Query(None, alias="chatId"),
    limit: int = DEFAULT_LIMIT,
    db: Session = Depends(get_db)
):
    with upstream_errors("Failed to fetch messages"):
        return MessageService(db).list(chat_id, limit)


@router.post("/messages", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def send_message(message: MessageCreate, db: Session = Depends(get_db)):
    with upstream_errors("Failed to send message"):
        return MessageService(db).send(message)


@router.post("/messages/assistant", response_model=List[MessageResponse], status_code=status.HTTP_201_CREATED)
async def ask_assistant(
    turn: AssistantTurnRequest,
    db: Session = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service)
):
    with upstream_errors("Failed to send message"):
        return await MessageService(db).ask_assistant(turn, ai_service)


# Assistant
@router.post("/ai", response_model=ChatResponse)
async def chat_with_assistant(request: ChatRequest, ai_service: AIService = Depends(get_ai_service)):
    response = await ai_service.chat(request.message, request.context)
    return ChatResponse(response=response, timestamp=utc_timestamp())


@router.post("/ai/suggest", response_model=SuggestResponse)
async def suggest_services(request: SuggestRequest, ai_service: AIService = Depends(get_ai_service)):
    suggestions = await ai_service.suggest_services(request.description, request.location)
    return SuggestResponse(suggestions=suggestions, timestamp=utc_timestamp())


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request, settings: Settings = Depends(get_settings)):
    datastore = getattr(request.app.state, "datastore", None)
    ai_service = getattr(request.app.state, "ai_service", None)
    return HealthResponse(
        status="healthy",
        demo_mode=settings.demo_mode,
        datastore="connected" if datastore else "not configured",
        ai_status="connected" if ai_service and ai_service.is_configured else "not configured",
        timestamp=utc_timestamp()
    )


# Error handlers: every error body is {"error": <message>}
async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ())[1:])
        message = f"Invalid value for {field}: {first.get('msg')}" if field else first.get("msg", message)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": "Internal server error"})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()

    # Configure logging
    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        logger.info("Starting Worksy Marketplace API...")
        app.state.datastore = create_datastore(settings.database_url)
        app.state.ai_service = AIService(api_key=settings.openai_api_key, model=settings.openai_model)
        if settings.demo_mode:
            logger.info("Demo mode enabled: /services listing serves the sample catalog")
        yield
        # Shutdown
        logger.info("Shutting down Worksy Marketplace API...")
        if app.state.datastore:
            app.state.datastore.dispose()

    app = FastAPI(
        title=settings.project_name,
        version=settings.api_version,
        description="Marketplace API connecting customers with service providers",
        lifespan=lifespan
    )
    app.state.settings = settings

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(MarketplaceError, marketplace_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # The web client calls the same routes under /api
    app.include_router(router)
    app.include_router(router, prefix="/api")

    @app.get("/")
    async def root():
        return {"message": settings.project_name, "version": settings.api_version}

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000)
