from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.endpoints import auth, repositories, seed, squads, users
from app.core.config import settings
from app.core.exceptions import (
    http_exception_handler,
    python_exception_handler,
    validation_exception_handler,
)
from app.core.logging import init_sentry, setup_logging
from app.db.session import init_models
from app.middleware.logging import AccessLoggingMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_models()
    yield


app = FastAPI(
    title="Project Phoenix API",
    description="""
## 🔥 Project Phoenix

Find abandoned open-source projects and organise squads to revive them.

### Authentication

Sign in with GitHub:

1. Open `GET /api/auth/github` in the browser
2. Authorize the app on GitHub
3. The callback sets the `phoenix_session` cookie and redirects to the dashboard

Endpoints that need a session answer `401 {"error": "Not authenticated"}` without it.

### Catalog
- **Repositories**: imported from GitHub and scored (active, at-risk, abandoned)
- **Squads**: working groups per repository; only the creator can edit or delete one
    """,
    version="1.0.0",
    lifespan=lifespan,
)

# Initialize logging and error tracking
setup_logging()
init_sentry()

origins = [
    settings.APP_URL,
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,        # Session cookie travels with requests
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(
    AccessLoggingMiddleware,
    enabled=settings.ACCESS_LOG_ENABLED,
    slow_threshold=settings.SLOW_REQUEST_THRESHOLD,
)

app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, python_exception_handler)

app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(repositories.router, prefix="/api/repositories", tags=["repositories"])
app.include_router(squads.router, prefix="/api/squads", tags=["squads"])
app.include_router(users.router, prefix="/api/users/me", tags=["users"])
app.include_router(seed.router, prefix="/api/seed", tags=["seed"])


@app.get("/")
def root():
    return {"message": "Welcome to the Project Phoenix API. The OpenAPI docs live at /docs"}


@app.get("/health")
def health():
    return {"status": "ok"}
