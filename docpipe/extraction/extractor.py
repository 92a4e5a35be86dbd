"""AI-powered company information extractor."""

import json
from pathlib import Path

from docpipe.extraction.base import BaseExtractor
from docpipe.extraction.client_base import BaseExtractionClient
from docpipe.extraction.exceptions import ExtractionError, ExtractionParseError
from docpipe.extraction.models import ExtractionFailure, ExtractionOutcome, ExtractionSuccess
from docpipe.extraction.prompt_loader import load_json_schema, load_prompt_template
from docpipe.extraction.validator import build_attributes
from docpipe.logging.logger import Log

SYSTEM_PROMPT = "You are an AI that extracts structured company information from documents."


class CompanyExtractor(BaseExtractor):
    """Extracts company attributes from OCR text using an AI provider."""

    def __init__(
        self,
        *,
        client: BaseExtractionClient,
        model: str,
        temperature: float = 0.2,
        max_text_chars: int = 10_000,
        prompt_template_path: Path | None = None,
        json_schema_path: Path | None = None,
        system_prompt: str = SYSTEM_PROMPT,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = max(0.0, min(0.2, temperature))
        self._max_text_chars = max_text_chars
        self._system_prompt = system_prompt
        self._prompt_template = load_prompt_template(prompt_template_path)
        self._json_schema_dict = json.loads(load_json_schema(json_schema_path))

    async def extract(self, text: str, owner_id: int) -> ExtractionOutcome:
        prompt = self._build_prompt(text)
        Log.debug(f"Extraction prompt for user {owner_id}:\n{prompt}")

        try:
            raw_response = await self._client.create_chat_completion(
                model=self._model,
                temperature=self._temperature,
                system_prompt=self._system_prompt,
                user_prompt=prompt,
                json_schema=self._json_schema_dict,
            )
            Log.debug(f"AI raw response:\n{raw_response}")
            attributes = build_attributes(self._parse_json(raw_response))
        except ExtractionError as exc:
            Log.warning(f"Company extraction for user {owner_id} failed, using empty result: {exc}")
            return ExtractionFailure(reason=str(exc))

        Log.info(
            f"Extraction complete for user {owner_id}: "
            f"{len(attributes.main_industries)} industries, "
            f"{len(attributes.company_activities)} activities"
        )
        return ExtractionSuccess(attributes=attributes)

    def _build_prompt(self, text: str) -> str:
        return self._prompt_template.format(document_text=text[: self._max_text_chars])

    @staticmethod
    def _parse_json(raw: str) -> dict[str, object]:
        cleaned = raw.strip()
        if cleaned.startswith("```"):
            lines = cleaned.splitlines()
            if lines and lines[0].startswith("```"):
                lines = lines[1:]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            cleaned = "\n".join(lines)

        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            raise ExtractionParseError(f"Invalid JSON response: {exc}") from exc

        if not isinstance(parsed, dict):
            raise ExtractionParseError("JSON response must be an object")
        return parsed
