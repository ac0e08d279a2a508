"""
Botdesk API - FastAPI application entry point
Multi-tenant chatbots over private documents, gated by subscription quotas
"""

import logging

# Configure logging to show INFO level
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s"
)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from botdesk.config import settings
from botdesk.database import create_tables
from botdesk.utils.error_handlers import setup_error_handlers

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Chatbots over private documents with subscription quotas",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {"name": "documents", "description": "Document indexing and management"},
        {"name": "chatbots", "description": "Chatbot creation, sharing and quota usage"},
        {"name": "chat", "description": "Conversations with chatbots"},
        {"name": "public chat", "description": "Anonymous conversations with public chatbots"}
    ]
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_error_handlers(app)


@app.on_event("startup")
async def startup_event():
    """Initialize database tables on startup"""
    create_tables()
    print(f"{settings.APP_NAME} v{settings.APP_VERSION} started")
    print(f"Database: {settings.DATABASE_URL}")
    print(f"API Docs: http://{settings.API_HOST}:{settings.API_PORT}/docs")


@app.get("/")
async def root():
    """Health check endpoint"""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "healthy"
    }


@app.get("/health")
async def health_check():
    """Detailed health check"""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT
    }


# Import and register routers
from botdesk.api import chat, chatbots, documents, public_chat

app.include_router(documents.router, prefix="/api/v1")
app.include_router(chatbots.router, prefix="/api/v1")
app.include_router(chat.router, prefix="/api/v1")
app.include_router(public_chat.router, prefix="/api/v1")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "botdesk.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.API_RELOAD
    )
