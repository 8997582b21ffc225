"""
HolidayEase Backend - Main Application
FastAPI entry point
"""

from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import time

from app.config import settings
from app.routes.auth import router as auth_router
from app.routes.hotels import router as hotels_router
from app.routes.locations import router as locations_router
from app.routes.packages import legacy_router as legacy_packages_router
from app.routes.packages import router as packages_router
from app.services import Services, get_services

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle"""
    # Startup
    print("🏖  HolidayEase Backend starting...")
    print(f"   Debug mode: {settings.debug}")
    print(f"   TourVisio API: {settings.tourvisio_base_url}")
    print(f"   Agency credential: {settings.tourvisio_agency}/{settings.tourvisio_user} "
          f"{'✓ configured' if settings.tourvisio_password else '✗ password not configured'}")
    print(f"   Location cache TTL: {settings.location_cache_ttl_minutes} min")
    print(f"   Detail fallbacks: {'lenient' if settings.detail_lenient_fallbacks else 'strict'}")

    yield

    # Shutdown
    print("🧳 HolidayEase Backend shutting down...")
    await get_services().close()


# Create FastAPI application
app = FastAPI(
    title="HolidayEase API",
    description="""
    ## HolidayEase Holiday Package API

    Search, detail and room-offer lookups over the TourVisio booking API.

    ### Modules

    - **Authentication**: agency sign-in and session status
    - **Locations**: departure points, regions, check-in dates, nights, price range
    - **Holiday Packages**: priced hotel offers for a search
    - **Hotels**: offer details and bookable room offers
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=False,  # Must be False when using wildcard "*" for origins
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)


# Request timing middleware
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(round(process_time * 1000, 2))
    return response


# Exception handlers
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal Server Error",
            "detail": str(exc) if settings.debug else "An unexpected error occurred",
            "code": 500
        }
    )


# Include routers
app.include_router(auth_router)
app.include_router(locations_router)
app.include_router(packages_router)
app.include_router(legacy_packages_router)
app.include_router(hotels_router)


# Root endpoint
@app.get("/", tags=["Health"])
async def root():
    """API root"""
    return {
        "name": "HolidayEase API",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
        "health": "/health"
    }


@app.get("/health", tags=["Health"])
async def health_check(services: Services = Depends(get_services)):
    """Health check"""
    return {
        "status": "healthy",
        "services": {
            "api": "ok",
            "tourvisio": "authenticated" if services.session_manager.is_authenticated else "signed_out",
            "location_cache": "warm" if services.location_cache.is_valid() else "cold",
        }
    }


# Run with: uvicorn app.main:app --reload
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
