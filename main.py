# main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bloodlink import config, database, models
from bloodlink import admin as admin_router
from bloodlink import auth as auth_router
from bloodlink import profile as profile_router
from bloodlink import request_routes as requests_router
from bloodlink.errors import register_exception_handlers

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("bloodlink")

@asynccontextmanager
async def lifespan(app: FastAPI):
    if config.JWT_SECRET == config.DEFAULT_JWT_SECRET:
        logger.warning("JWT_SECRET is not set; using the development default")
    models.Base.metadata.create_all(bind=database.engine)
    logger.info("Token policy %s (ttl %s)", config.TOKEN_POLICY, config.TOKEN_TTL)
    yield

app = FastAPI(title="BloodLink API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth_router.router)
app.include_router(profile_router.router)
app.include_router(requests_router.router)
app.include_router(admin_router.router)

@app.get("/health")
def health():
    return {"status": "ok"}
