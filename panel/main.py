"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from dotenv import load_dotenv

load_dotenv()

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from panel.api import router
from panel.api.deps import principal_from_token, session_token_from_request
from panel.core.config import settings
from panel.services.access_policy import AccessDecision, AccessPolicy

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Account Panel API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

access_policy = AccessPolicy.from_settings(settings)


@app.middleware("http")
async def enforce_access_policy(request: Request, call_next):
    """Resolve the session principal and apply the access policy before any handler runs."""
    principal = principal_from_token(session_token_from_request(request))
    request.state.principal = principal
    decision = access_policy.evaluate(
        request.url.path,
        principal.authorities if principal is not None else None,
    )
    if decision is AccessDecision.UNAUTHENTICATED:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"detail": "Not authenticated"},
            headers={"WWW-Authenticate": "Bearer"},
        )
    if decision is AccessDecision.FORBIDDEN:
        logger.info(
            "Access denied",
            extra={"path": request.url.path, "user_id": principal.id if principal else None},
        )
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content={"detail": "Access denied"},
        )
    return await call_next(request)


# Added after the policy middleware so CORS headers wrap its 401/403 responses too.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.APP_ENV == "dev" else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.get("/")
def root() -> dict[str, str]:
    """Root route; minimal payload for discovery."""
    return {"message": "Account Panel API"}
