#db file
from pymongo import MongoClient
import certifi
from voice2product.config import (
    MONGODB_URI, MONGODB_TLS, DB_NAME, TRANSCRIPTION_COLL, ORDER_COLL, PRODUCT_COLL,
)

# MongoClient connects lazily, importing this module never touches the network
_tls_opts = {"tls": True, "tlsCAFile": certifi.where()} if MONGODB_TLS else {}

client = MongoClient(
    MONGODB_URI,
    serverSelectionTimeoutMS=30000,
    **_tls_opts,
)

db             = client[DB_NAME]
transcriptions = db[TRANSCRIPTION_COLL]
orders         = db[ORDER_COLL]
products       = db[PRODUCT_COLL]
