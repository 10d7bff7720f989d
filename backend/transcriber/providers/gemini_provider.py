import logging
from typing import Optional

import httpx


GEMINI_BASE = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_GEMINI_MODEL = "gemini-2.0-flash-exp"
REQUEST_TIMEOUT = 300

TRANSCRIPTION_PROMPT = (
    "Transcreva o vídeo completo incluindo identificação de locutores quando possível. "
    "Formate a transcrição de forma clara e organize por timestamps."
)


class ProviderError(RuntimeError):
    pass


class ProviderConfigError(ProviderError):
    pass


def _build_payload(video_url: str) -> dict:
    return {
        "contents": [
            {
                "parts": [
                    {"fileData": {"fileUri": video_url}},
                    {"text": TRANSCRIPTION_PROMPT},
                ]
            }
        ]
    }


def extract_transcript_text(data: dict) -> Optional[str]:
    """Pull the first candidate's first text part out of a generateContent reply."""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    if not isinstance(text, str) or not text.strip():
        return None
    return text


class GeminiProvider:
    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_GEMINI_MODEL,
        base_url: str = GEMINI_BASE,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self._transport = transport

    async def transcribe(self, video_url: str, job_id: str) -> str:
        """Ask Gemini for a full transcript of the video in a single request."""
        if not self.api_key:
            raise ProviderConfigError("GOOGLE_API_KEY is required for Gemini provider")

        # key travels as a header so it stays out of logged request URLs
        headers = {"x-goog-api-key": self.api_key}
        async with httpx.AsyncClient(
            timeout=REQUEST_TIMEOUT, transport=self._transport
        ) as client:
            logging.info(
                "job %s requesting transcription from %s for %s",
                job_id,
                self.model,
                video_url,
            )
            resp = await client.post(
                f"{self.base_url}/models/{self.model}:generateContent",
                json=_build_payload(video_url),
                headers=headers,
            )
            if not resp.is_success:
                logging.error(
                    "job %s gemini returned %s: %s",
                    job_id,
                    resp.status_code,
                    resp.text[:500],
                )
                raise ProviderError(f"Gemini API error: {resp.status_code}")
            try:
                data = resp.json()
            except ValueError as exc:
                raise ProviderError("Gemini API returned invalid JSON") from exc

        text = extract_transcript_text(data)
        if text is None:
            raise ProviderError("No transcription text received from Gemini API")
        logging.info("job %s transcription received, length=%d", job_id, len(text))
        return text
