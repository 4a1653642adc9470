import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from green_essays.core.config import settings
from green_essays.core.db import dispose_engine
from green_essays.api.http.health import router as health_router
from green_essays.api.http.essays import router as essays_router

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting Green Essays API (log level {settings.log_level})")
    yield
    await dispose_engine()
    logger.info("Database connections closed")


app = FastAPI(
    title="Green Essays",
    description="Эссе раздела «Зеленый переход»: чтение, редактирование и публикация",
    version="1.0.0",
    lifespan=lifespan
)

# Настройка CORS для работы с frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Подключаем роутеры
app.include_router(health_router)
app.include_router(essays_router)


@app.get("/")
async def root():
    """Корневой эндпоинт"""
    return {
        "message": "Green Essays API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }
