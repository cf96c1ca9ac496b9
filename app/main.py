import logging

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from fastapi.staticfiles import StaticFiles

from app.shared.config import settings
from app.shared.db import init_db
from app.shared.errors import install_error_handlers

# Routers Import
from app.auth.api import router as auth_router
from app.users.api import router as users_router
from app.tags.api import router as tags_router
from app.files.api import router as files_router
from app.files.storage import UPLOADS_DIR

logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

TAGS_METADATA = [
    {"name": "Auth", "description": "Register, sign in, current user"},
    {"name": "Files", "description": "Upload, list, search, tag and delete PDFs"},
    {"name": "Tags", "description": "Tag names and admin tag management"},
    {"name": "Users", "description": "Admin user management and self-service edits"},
    {"name": "Health", "description": "Service health"},
]

app = FastAPI(
    title="PDF Share",
    version="1.0.0",
    description="Role-scoped PDF sharing API with tagging.",
    openapi_tags=TAGS_METADATA,
)

install_error_handlers(app)


@app.on_event("startup")
def _init_db():
    init_db()

@app.get("/healthz", tags=["Health"])
def healthz():
    return {"ok": True}


# --- Custom OpenAPI: add bearerAuth as the default for every op except public ones ---
PUBLIC_PATHS = {"/healthz", "/api/auth/register", "/api/auth/login"}

def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )
    schema.setdefault("components", {}).setdefault("securitySchemes", {})
    schema["components"]["securitySchemes"]["bearerAuth"] = {
        "type": "http",
        "scheme": "bearer",
        "bearerFormat": "JWT",
    }
    for path, ops in schema.get("paths", {}).items():
        if path in PUBLIC_PATHS:
            continue
        for op in ops.values():
            op.setdefault("security", [{"bearerAuth": []}])
    app.openapi_schema = schema
    return app.openapi_schema

# Routers (tags before files: /api/files/tags must not hit /api/files/{file_id})
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(tags_router)
app.include_router(files_router)

app.mount("/uploads", StaticFiles(directory=str(UPLOADS_DIR)), name="uploads")

app.openapi = custom_openapi
