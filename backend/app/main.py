# Load environment variables FIRST before any other imports
from dotenv import load_dotenv
load_dotenv()

import os
import logging
import sentry_sdk
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.database import engine, Base, SessionLocal
from app.routers import admin, auth, quiz, users
from app.services.openai_service import get_openai_service

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Initialize Sentry for error monitoring
sentry_dsn = os.getenv("SENTRY_DSN")
if sentry_dsn:
    sentry_sdk.init(
        dsn=sentry_dsn,
        traces_sample_rate=0.1,
        environment=os.getenv("ENVIRONMENT", "development"),
    )

# Create database tables
Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler - runs on startup and shutdown."""
    if os.getenv("SEED_ON_STARTUP", "true").lower() == "true":
        from app.services.seed import initialize_data
        logger.info("Initializing application data...")
        db = SessionLocal()
        try:
            initialize_data(db)
        finally:
            db.close()
        logger.info("Application data initialization completed")
    else:
        logger.info("Start-up seeding disabled via SEED_ON_STARTUP=false")

    if not os.getenv("RESEND_API_KEY"):
        logger.info("Email delivery disabled (no RESEND_API_KEY)")

    yield  # Application runs here

    logger.info("Shutting down...")


tags_metadata = [
    {
        "name": "authentication",
        "description": "Passwordless login with one-time passcodes sent by email.",
    },
    {
        "name": "quiz",
        "description": "Initial and adaptive quizzes, scoring, explanations and AI question generation.",
    },
    {
        "name": "user",
        "description": "Profile, quiz history, reports and study recommendations.",
    },
    {
        "name": "admin",
        "description": "User management and platform statistics. **Requires admin access.**",
    },
]

app = FastAPI(
    title="Adaptive Quiz Learner API",
    description="""
## Adaptive Quiz Learner

Adaptive Class 6 Biology quizzes. The first quiz samples every topic; later
quizzes concentrate on the topics the student keeps getting wrong.

### Features
- **Initial Assessment** - 3 questions from each of the 8 topics
- **Adaptive Quizzes** - 20 questions weighted towards weak topics
- **AI Explanations** - generated once per question, then cached
- **AI Question Generation** - new questions for weak topics
- **Study Recommendations** - personalised weekly plans
    """,
    version="1.0.0",
    lifespan=lifespan,
    openapi_tags=tags_metadata,
)

ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
]

extra_origins = os.getenv("CORS_ALLOWED_ORIGINS", "")
if extra_origins:
    ALLOWED_ORIGINS.extend([o.strip() for o in extra_origins.split(",") if o.strip()])

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Requested-With", "Accept"],
)


# ==================== Error envelope ====================

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else first.get("msg")
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"success": False, "message": message})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    sentry_sdk.capture_exception(exc)
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Internal server error"},
    )


# Include routers
app.include_router(auth.router)
app.include_router(quiz.router)
app.include_router(users.router)
app.include_router(admin.router)


@app.get("/")
def root():
    return {
        "message": "Adaptive Quiz Learner API",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health")
def health_check():
    return {
        "status": "healthy",
        "ai_service": "healthy" if get_openai_service().is_healthy() else "degraded",
    }
