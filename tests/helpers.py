import json

from docpipe.ocr.models import OcrPollResult, OcrState


class RecordingSleep:
    """Stands in for asyncio.sleep and records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def in_progress() -> OcrPollResult:
    return OcrPollResult(state=OcrState.IN_PROGRESS)


def complete(text: str) -> OcrPollResult:
    return OcrPollResult(state=OcrState.COMPLETE, text=text)


def provider_error(message: str) -> OcrPollResult:
    return OcrPollResult(state=OcrState.ERROR, message=message)


def company_json(**overrides: object) -> str:
    payload: dict[str, object] = {
        "companyDescription": "Builds and maintains commercial buildings.",
        "businessType": "LLC",
        "companyActivities": ["General contracting"],
        "mainIndustries": ["Construction"],
        "specializations": ["Steel structures"],
    }
    payload.update(overrides)
    return json.dumps(payload)
