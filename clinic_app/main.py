# clinic_app/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from clinic_app.api.exception_handlers import register_exception_handlers
from clinic_app.api.router import api_router
from clinic_app.core.config import settings
from clinic_app.db.base import Base, import_models
from clinic_app.db.session import engine

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.on_event("startup")
def create_tables():
    import_models()
    Base.metadata.create_all(bind=engine)
    logger.info("database ready url=%s", engine.url.render_as_string(hide_password=True))


app.include_router(api_router, prefix=settings.API_V1_STR)


# Health
@app.get("/")
def root():
    return {"message": "DoctorConnect billing API running", "version": "v1"}
