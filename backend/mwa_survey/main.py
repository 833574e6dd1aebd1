# ------------------------------
# FastAPI app for the thyroid MWA survey
# Wizard routes, submission endpoint, admin dashboard endpoints
# ------------------------------
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mwa_survey.api import admin, survey
from mwa_survey.core import config
from mwa_survey.core.logging_config import configure_logging
from mwa_survey.db.session import init_db
from mwa_survey.routes.runs import router as runs_router

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    init_db()
    logger.info("survey API %s ready (database: %s)", config.SURVEY_VERSION, config.DATABASE_URL.split(":", 1)[0])
    yield


# 'app' is what Uvicorn looks for when you run: uvicorn mwa_survey.main:app --reload
app = FastAPI(
    title="Thyroid MWA Survey API",
    version=config.SURVEY_VERSION,
    lifespan=lifespan,
)

# The form and the dashboard are served from another origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.get("/")
def root():
    return {"message": "API is running. Go to /docs for Swagger UI."}


app.include_router(survey.router, prefix="/api")
app.include_router(runs_router, prefix="/api")
app.include_router(admin.router, prefix="/api")
