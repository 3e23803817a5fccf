"""
Lifespan FastAPI: initialisation/arrêt des ressources partagées.
- Garde anti-doublons de /checkout/verify (app.state.session_guard)
- FastAPILimiter (Redis) avec options de test (fakeredis)
Variables d'environnement supportées:
  - DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS=1: désactive complètement (tests)
  - USE_FAKE_REDIS_FOR_TESTS=1: utilise fakeredis (tests)
  - LOCAL_RATE_LIMIT_FALLBACK=1: active un fallback local si l'init échoue
"""
import os
import logging
import redis.asyncio as redis
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi_limiter import FastAPILimiter

from tailormint.config import RATE_LIMIT_REDIS_URL, SESSION_GUARD_WINDOW_SECONDS
from tailormint.orders.session_guard import ProcessedSessionGuard

try:
    from fakeredis.aioredis import FakeRedis  # tests only
except ImportError:
    FakeRedis = None


async def _init_rate_limiter(app: FastAPI, logger: logging.Logger) -> None:
    if os.getenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS") == "1":
        app.state.rate_limit_enabled = False
        logger.info("Rate limiting disabled by DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS")
        return
    try:
        if os.getenv("USE_FAKE_REDIS_FOR_TESTS") == "1":
            if not FakeRedis:
                raise RuntimeError("USE_FAKE_REDIS_FOR_TESTS=1 but fakeredis is not installed")
            r = FakeRedis(decode_responses=True)
        else:
            r = redis.from_url(RATE_LIMIT_REDIS_URL, encoding="utf-8", decode_responses=True)
        await FastAPILimiter.init(r)
        app.state.rate_limit_enabled = True
        logger.info("Rate limiting enabled")
    except Exception as e:
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            app.state.rate_limit_enabled = True
            logger.warning("Rate limiting falling back to local in-memory due to init error: %s", e)
        else:
            app.state.rate_limit_enabled = False
            logger.warning("Rate limiting disabled due to init error: %s", e)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Prépare l'état partagé puis libère le limiteur à l'arrêt.
    En cas d'échec de Redis et sans fallback, le rate limiting est désactivé proprement.
    """
    logger = logging.getLogger("uvicorn.error")
    app.state.session_guard = ProcessedSessionGuard(window_seconds=SESSION_GUARD_WINDOW_SECONDS)
    logger.info("Session guard ready (window=%ss)", SESSION_GUARD_WINDOW_SECONDS)
    await _init_rate_limiter(app, logger)
    try:
        yield
    finally:
        app.state.session_guard.clear()
        if getattr(app.state, "rate_limit_enabled", False) and os.getenv("LOCAL_RATE_LIMIT_FALLBACK") != "1":
            try:
                await FastAPILimiter.close()
            except Exception as e:
                logger.warning("Rate limiter close failed: %s", e)
