# Routes Package
from app.routes.auth import router as auth_router
from app.routes.hotels import router as hotels_router
from app.routes.locations import router as locations_router
from app.routes.packages import router as packages_router
