import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from quillcms.cache import cache
from quillcms.config import settings
from quillcms.middleware import RequestStatsMiddleware
from quillcms.routers import graphql


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(level=settings.LOG_LEVEL)
    try:
        await cache.connect()
    except Exception as exc:
        logging.getLogger(__name__).warning("Cache unavailable, continuing without it: %s", exc)
    yield
    await cache.disconnect()


app = FastAPI(
    title="Quill CMS API",
    description="GraphQL content API for articles, comments, pages and files",
    version="1.0.0",
    lifespan=lifespan,
)

# Middleware
app.add_middleware(RequestStatsMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(graphql.router)


@app.get("/health")
async def health():
    return {"status": "healthy", "version": "1.0.0", "cache": cache.stats}
