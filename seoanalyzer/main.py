from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from seoanalyzer.api.routes import analysis
from seoanalyzer.config import settings
from seoanalyzer.services import logger as _logging  # noqa: F401  configures sinks


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    yield
    # Shutdown


app = FastAPI(
    title="LLM SEO Analyzer",
    description="Scores how friendly a webpage is to large language models",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes
app.include_router(analysis.router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "service": "seoanalyzer"}
