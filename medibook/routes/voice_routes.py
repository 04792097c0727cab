import logging

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, field_validator

from medibook.core import config
from medibook.services import extraction_service
from medibook.services.errors import ExtractionError
from medibook.services.extraction_service import ExtractedAppointment

router = APIRouter(tags=['voice'])

logger = logging.getLogger(__name__)

MAX_TRANSCRIPT_LENGTH = 2000


class ExtractRequest(BaseModel):
    transcript: str

    @field_validator('transcript')
    @classmethod
    def validate_transcript(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Transcript is required.')
        if len(normalized) > MAX_TRANSCRIPT_LENGTH:
            raise ValueError(f'Transcript must be {MAX_TRANSCRIPT_LENGTH} characters or fewer.')
        return normalized


@router.post('/extract', response_model=ExtractedAppointment)
def extract(data: ExtractRequest):
    if not config.OPENAI_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail='Voice extraction is not configured',
        )

    try:
        return extraction_service.extract_appointment_fields(data.transcript)
    except ExtractionError as exc:
        logger.exception('Voice extraction failed')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Failed to extract data',
        ) from exc
