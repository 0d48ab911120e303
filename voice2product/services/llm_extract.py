import json
import logging

from voice2product.config import EXTRACTOR_MODEL
from voice2product.services.extraction_parser import EXTRACTION_FORMAT_VERSION, format_extraction_line
from voice2product.services.groq_client import CollaboratorError, get_client

log = logging.getLogger(__name__)

_EXAMPLE = format_extraction_line("Tomato", "Tomato", 5, "kg")

EXTRACTION_REQUEST = (
    "Please provide the list of products and their quantities in the format: "
    "Product - Name: [name], Quantity: [quantity], Unit: [unit]. "
    f"Example: {_EXAMPLE}. "
    "Return the products list in plain text, no JSON required."
)


def build_prompt(transcript: str) -> str:
    return json.dumps({
        "transcription": transcript,
        "request": EXTRACTION_REQUEST,
        "format_version": EXTRACTION_FORMAT_VERSION,
    })


def request_extraction(transcript: str) -> str:
    """
    Ask the extraction model for product lines. Returns the raw reply text,
    to be read by extraction_parser.parse().
    """
    client = get_client()
    try:
        rsp = client.chat.completions.create(
            model=EXTRACTOR_MODEL,
            temperature=0,
            messages=[{"role": "user", "content": build_prompt(transcript)}],
        )
    except Exception as e:
        log.error(f"Extractor LLM error: {e}")
        raise CollaboratorError(f"LLM extraction failed: {e}") from e
    return (rsp.choices[0].message.content or "").strip()
