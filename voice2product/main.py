import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402

from voice2product.config import CORS_ORIGINS, LOG_LEVEL  # noqa: E402
from voice2product.router import catalog, orders, transcribe  # noqa: E402
from voice2product.services.catalog_loader import reload_catalog  # noqa: E402

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    index = reload_catalog()
    log.info("Catalog ready with %d products", len(index))
    yield


app = FastAPI(title="Voice2Product", version="1.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(transcribe.router)
app.include_router(orders.router)
app.include_router(catalog.router)
