"""
Turns a spoken booking request into structured fields with an OpenAI chat model.

The reply is expected to contain one JSON object. Every field of the result is
optional: the model may omit, rename or blank any of them, and callers must not
rely on any field being present.
"""

import json
import logging
import re
from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from medibook.core import config
from medibook.services.errors import ExtractionError, InvalidModelOutputError

logger = logging.getLogger(__name__)

# Greedy on purpose: spans from the first "{" to the last "}".
JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")

EXTRACTION_PROMPT = """You are a helpful assistant that extracts appointment information from voice transcriptions.

Today is {today}.

Input: "{transcript}"

Extract and return a JSON object with the following fields:
- "patient_name"
- "doctor_name" (if the user says "Dr. Johnson", extract just "Johnson")
- "date" (format "YYYY-MM-DD"; resolve expressions like "21st of June" or "next Monday", assuming the current year if none is mentioned)
- "time" (24-hour format, e.g. "15:30")
- "purpose" (e.g. consultation, check-up, eye pain)

Use null for anything the speaker did not say. Return only the JSON object:
{{"patient_name": "", "doctor_name": "", "date": "", "time": "", "purpose": ""}}
"""


class ExtractedAppointment(BaseModel):
    model_config = ConfigDict(extra="ignore")

    patient_name: Optional[str] = None
    doctor_name: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    purpose: Optional[str] = None

    @field_validator("patient_name", "doctor_name", "date", "time", "purpose", mode="before")
    @classmethod
    def coerce_to_text(cls, value: Any) -> Optional[str]:
        if value is None or isinstance(value, (dict, list)):
            return None
        text = str(value).strip()
        return text or None


def create_client(api_key: str):
    from openai import OpenAI

    return OpenAI(api_key=api_key)


def build_prompt(transcript: str, today: date | None = None) -> str:
    return EXTRACTION_PROMPT.format(transcript=transcript, today=(today or date.today()).isoformat())


def parse_model_reply(text: str) -> ExtractedAppointment:
    match = JSON_OBJECT_RE.search(text or "")
    if match is None:
        return ExtractedAppointment()

    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        logger.error("Model output is not valid JSON: %r", text)
        raise InvalidModelOutputError("Invalid JSON output from the language model") from exc

    if not isinstance(parsed, dict):
        raise InvalidModelOutputError("Language model output is not a JSON object")
    return ExtractedAppointment.model_validate(parsed)


def extract_appointment_fields(transcript: str, client=None) -> ExtractedAppointment:
    client = client or create_client(config.OPENAI_API_KEY)

    try:
        response = client.chat.completions.create(
            model=config.OPENAI_MODEL,
            messages=[{"role": "user", "content": build_prompt(transcript)}],
            temperature=0,
        )
        text_out = response.choices[0].message.content or ""
    except Exception as exc:
        raise ExtractionError(f"Language model call failed: {exc}") from exc

    return parse_model_reply(text_out)
