from functools import lru_cache

from openai import OpenAI

from voice2product.config import GROQ_API_KEY, LLM_BASE_URL


class CollaboratorError(RuntimeError):
    """An upstream speech or language model call failed."""


@lru_cache(maxsize=1)
def get_client() -> OpenAI:
    if not GROQ_API_KEY:
        raise CollaboratorError("GROQ_API_KEY not set")
    return OpenAI(api_key=GROQ_API_KEY, base_url=LLM_BASE_URL)
