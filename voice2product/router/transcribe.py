import logging
import os
import shutil
import tempfile
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, File, HTTPException, UploadFile
from pymongo.errors import PyMongoError

from voice2product.schemas.models import TranscriptionUpdate
from voice2product.services import order_store
from voice2product.services.catalog_loader import get_index
from voice2product.services.extraction_parser import parse
from voice2product.services.groq_client import CollaboratorError
from voice2product.services.llm_extract import request_extraction
from voice2product.services.pipeline import price_extractions
from voice2product.services.transcribe import transcribe_audio

log = logging.getLogger(__name__)
router = APIRouter(tags=["transcriptions"])


def _save_upload(upload: UploadFile) -> str:
    suffix = os.path.splitext(upload.filename or "")[1]
    fd, path = tempfile.mkstemp(prefix="upload-", suffix=suffix)
    with os.fdopen(fd, "wb") as out:
        shutil.copyfileobj(upload.file, out)
    return path


@router.post("/transcribe")
def transcribe(audioFile: Optional[UploadFile] = File(None)) -> Dict[str, Any]:
    """
    Audio upload -> transcript -> LLM product lines -> catalog-priced order.
    The transcription is stored when at least one product was understood.
    """
    if audioFile is None:
        raise HTTPException(status_code=400, detail="No audio file uploaded")

    path = _save_upload(audioFile)
    try:
        transcript = transcribe_audio(path, audioFile.filename)
    except CollaboratorError as e:
        raise HTTPException(status_code=502, detail=str(e))
    finally:
        os.unlink(path)

    if not transcript:
        raise HTTPException(status_code=400, detail="No speech detected in the audio")

    reason = ""
    try:
        extractions = parse(request_extraction(transcript))
    except CollaboratorError as e:
        extractions, reason = [], str(e)
    if not extractions and not reason:
        reason = "No products recognized in the transcription."

    priced = price_extractions(extractions, get_index())

    transcription_id = None
    products: List[Dict[str, Any]] = order_store.transcription_products(priced, extractions)
    if products:
        try:
            transcription_id = order_store.save_transcription(transcript, products, priced.changes)
        except PyMongoError as e:
            log.error("Error saving transcription: %s", e)
            raise HTTPException(status_code=503, detail="Database unavailable. Transcription not saved.")

    return {
        "success": True,
        "message": "Audio processed successfully",
        "transcriptionId": transcription_id,
        "transcription": transcript,
        "products": priced.model_dump(mode="json")["items"],
        "total": float(priced.total),
        "unmatched": [m.query for m in priced.unmatched],
        "changeHistory": [c.model_dump(mode="json") for c in priced.changes],
        "warnings": priced.warnings,
        "reason": reason,
    }


@router.get("/transcriptions")
def last_transcription() -> Dict[str, Any]:
    try:
        doc = order_store.latest_transcription()
    except PyMongoError as e:
        log.error("Error fetching transcriptions: %s", e)
        raise HTTPException(status_code=503, detail="An error occurred while fetching transcriptions")
    if not doc:
        raise HTTPException(status_code=404, detail="No transcriptions found")
    return doc


@router.put("/transcriptions/{transcription_id}")
def edit_transcription(transcription_id: str, req: TranscriptionUpdate) -> Dict[str, Any]:
    if req.products is None:
        raise HTTPException(status_code=400, detail="Products data is required.")
    try:
        doc = order_store.update_transcription(transcription_id, req.products, req.change_record)
    except PyMongoError as e:
        log.error("Error updating transcription: %s", e)
        raise HTTPException(status_code=503, detail="Error updating transcription.")
    if not doc:
        raise HTTPException(status_code=404, detail="Transcription not found.")
    return doc
