import os

MATCH_THRESHOLD: float = float(os.getenv("MATCH_THRESHOLD", "0.6"))
TAX_RATE: float = float(os.getenv("TAX_RATE", "0.10"))
CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "$")

MONGODB_URI = os.getenv(
    "MONGODB_URI", "mongodb://localhost:27017"
)
MONGODB_TLS  = os.getenv("MONGODB_TLS", "false").lower() in ("1", "true", "yes")
DB_NAME      = os.getenv("DB_NAME", "voice2product")
TRANSCRIPTION_COLL = os.getenv("TRANSCRIPTION_COLLECTION", "transcriptions")
ORDER_COLL   = os.getenv("ORDER_COLLECTION", "orders")
PRODUCT_COLL = os.getenv("PRODUCT_COLLECTION", "products")

# "file" or "mongo"
CATALOG_SOURCE = os.getenv("CATALOG_SOURCE", "file")
CATALOG_PATH   = os.getenv("CATALOG_PATH", "./data.txt")

# Groq speaks the OpenAI wire protocol
GROQ_API_KEY     = os.getenv("GROQ_API_KEY")
LLM_BASE_URL     = os.getenv("LLM_BASE_URL", "https://api.groq.com/openai/v1")
EXTRACTOR_MODEL  = os.getenv("EXTRACTOR_MODEL", "llama-3.3-70b-versatile")
TRANSCRIBE_MODEL = os.getenv("TRANSCRIBE_MODEL", "whisper-large-v3-turbo")
TRANSCRIBE_PROMPT = os.getenv("TRANSCRIBE_PROMPT", "Specify context or spelling")
TRANSCRIBE_LANGUAGE = os.getenv("TRANSCRIBE_LANGUAGE", "en")

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
LOG_LEVEL    = os.getenv("LOG_LEVEL", "INFO").upper()

COMPANY_NAME    = os.getenv("COMPANY_NAME", "Farm2Bag")
COMPANY_ADDRESS = os.getenv(
    "COMPANY_ADDRESS",
    "5/396, Rajeev Gandhi Salai, OMR Thoraipakkam|Chennai 600097, Tamil Nadu",
)
COMPANY_PHONE   = os.getenv("COMPANY_PHONE", "+91 95000 37221 | +91 91761 85709")
COMPANY_EMAIL   = os.getenv("COMPANY_EMAIL", "farm2bag@gmail.com")
