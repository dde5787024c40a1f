"""
Generative AI service using Google Gemini.

Thin wrappers over the google-genai client for the dashboard's AI tools:
photo editing, video tours, grounded market research and the live voice
assistant. None of these results are deterministic; callers only get
"output or error".
"""

import asyncio
import logging
import time
from typing import Dict, List, Optional

import httpx
import numpy as np
import pybase64
from google import genai
from google.genai import types

from propvest.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

DEFAULT_VIDEO_PROMPT = "Cinematic pan of the property"
NO_RESULTS_TEXT = "No results found."
RESEARCH_FAILED_TEXT = "Failed to perform market research. Please try again."
VOICE_SYSTEM_INSTRUCTION = (
    "You are a helpful real estate investment assistant. Help the user analyze "
    "the cash flow and potential of the property they are viewing. "
    "Be concise and professional."
)
PCM_SAMPLE_RATE = 16000
PCM_MIME_TYPE = f"audio/pcm;rate={PCM_SAMPLE_RATE}"


class GenAIError(Exception):
    """A generative AI call failed or returned nothing usable."""


class GenAIUnavailableError(GenAIError):
    """No API key is configured."""


def pcm_to_blob(samples) -> Dict[str, str]:
    """
    Encode float microphone samples for the live API.

    Args:
        samples: Float samples in [-1.0, 1.0]

    Returns:
        Dict with base64 little-endian 16-bit PCM ``data`` and its ``mimeType``
    """
    scaled = np.asarray(samples, dtype=np.float32) * 32768
    pcm = np.clip(scaled, -32768, 32767).astype("<i2")
    return {
        "data": pybase64.b64encode(pcm.tobytes()).decode("ascii"),
        "mimeType": PCM_MIME_TYPE,
    }


def _grounding_sources(response) -> List[Dict[str, Optional[str]]]:
    """Collect web citations from a grounded response."""
    candidates = response.candidates or []
    if not candidates or candidates[0].grounding_metadata is None:
        return []

    sources = []
    for chunk in candidates[0].grounding_metadata.grounding_chunks or []:
        if chunk.web is None:
            continue
        sources.append({"title": chunk.web.title, "uri": chunk.web.uri})
    return sources


class GenAIService:
    """Gemini integration for image, video, research and voice tools."""

    def __init__(self, client: Optional[genai.Client] = None):
        self.api_key = settings.gemini_api_key
        self.client = client

        if self.client is None and self.api_key:
            self.client = genai.Client(api_key=self.api_key)

    @property
    def available(self) -> bool:
        return self.client is not None

    def _require_client(self) -> genai.Client:
        if self.client is None:
            raise GenAIUnavailableError("GEMINI_API_KEY is not configured")
        return self.client

    async def edit_image(self, image_base64: str, prompt: str) -> str:
        """
        Apply a text instruction to a listing photo.

        Args:
            image_base64: JPEG image, base64 encoded
            prompt: Edit instruction (e.g., "add modern furniture")

        Returns:
            Edited image as a ``data:image/png;base64,...`` URL
        """
        client = self._require_client()
        try:
            response = await client.aio.models.generate_content(
                model=settings.image_edit_model,
                contents=[
                    types.Part.from_bytes(
                        data=pybase64.b64decode(image_base64), mime_type="image/jpeg"
                    ),
                    prompt,
                ],
            )
        except Exception as e:
            logger.error(f"Error editing image: {str(e)}")
            raise GenAIError("Image edit request failed") from e

        candidates = response.candidates or []
        parts = candidates[0].content.parts if candidates and candidates[0].content else []
        for part in parts or []:
            if part.inline_data is not None and part.inline_data.data:
                encoded = pybase64.b64encode(part.inline_data.data).decode("ascii")
                return f"data:image/png;base64,{encoded}"

        raise GenAIError("No image generated")

    async def generate_video(
        self, image_base64: str, prompt: str = DEFAULT_VIDEO_PROMPT
    ) -> str:
        """
        Animate a listing photo into a short video tour.

        Starts a long-running generation and polls it until done.

        Returns:
            URI of the generated video
        """
        client = self._require_client()
        try:
            operation = await client.aio.models.generate_videos(
                model=settings.video_model,
                prompt=prompt,
                image=types.Image(
                    image_bytes=pybase64.b64decode(image_base64),
                    mime_type="image/jpeg",
                ),
                config=types.GenerateVideosConfig(
                    number_of_videos=1,
                    resolution="720p",
                    aspect_ratio="16:9",
                ),
            )

            deadline = time.monotonic() + settings.veo_timeout_seconds
            while not operation.done:
                if time.monotonic() > deadline:
                    raise GenAIError("Video generation timed out")
                await asyncio.sleep(settings.veo_poll_interval_seconds)
                operation = await client.aio.operations.get(operation)
        except GenAIError:
            raise
        except Exception as e:
            logger.error(f"Error generating video: {str(e)}")
            raise GenAIError("Video generation request failed") from e

        if operation.error:
            logger.error(f"Video generation failed: {operation.error}")
            raise GenAIError("Video generation failed")

        videos = operation.response.generated_videos if operation.response else None
        if not videos or videos[0].video is None or not videos[0].video.uri:
            raise GenAIError("No video URI returned")

        logger.info(f"Video generated: {videos[0].video.uri}")
        return videos[0].video.uri

    async def fetch_video(self, video_uri: str) -> bytes:
        """Download generated video bytes; the URI requires the API key."""
        self._require_client()
        try:
            async with httpx.AsyncClient(timeout=120.0, follow_redirects=True) as http:
                response = await http.get(
                    video_uri, headers={"x-goog-api-key": self.api_key}
                )
                response.raise_for_status()
                return response.content
        except httpx.HTTPError as e:
            logger.error(f"Error downloading video: {str(e)}")
            raise GenAIError("Video download failed") from e

    async def market_research(self, query: str) -> Dict:
        """
        Answer a market question with Google Search grounding.

        Failures are reported in the returned text rather than raised.

        Returns:
            Dict with ``text`` and a list of ``sources`` (title, uri)
        """
        client = self._require_client()
        try:
            response = await client.aio.models.generate_content(
                model=settings.research_model,
                contents=query,
                config=types.GenerateContentConfig(
                    tools=[types.Tool(google_search=types.GoogleSearch())],
                ),
            )
        except Exception as e:
            logger.error(f"Market research error: {str(e)}")
            return {"text": RESEARCH_FAILED_TEXT, "sources": []}

        return {
            "text": response.text or NO_RESULTS_TEXT,
            "sources": _grounding_sources(response),
        }

    def live_config(self) -> types.LiveConnectConfig:
        """Configuration for the voice assistant's audio session."""
        return types.LiveConnectConfig(
            response_modalities=[types.Modality.AUDIO],
            speech_config=types.SpeechConfig(
                voice_config=types.VoiceConfig(
                    prebuilt_voice_config=types.PrebuiltVoiceConfig(
                        voice_name=settings.voice_name
                    )
                )
            ),
            system_instruction=VOICE_SYSTEM_INSTRUCTION,
        )

    def connect_live_session(self):
        """
        Open a bidirectional audio session.

        Use as ``async with service.connect_live_session() as session``.
        """
        client = self._require_client()
        logger.info("Opening live voice session")
        return client.aio.live.connect(model=settings.voice_model, config=self.live_config())


# Singleton instance
_genai_service: Optional[GenAIService] = None


def get_genai_service() -> GenAIService:
    """Get the generative AI service singleton."""
    global _genai_service
    if _genai_service is None:
        _genai_service = GenAIService()
    return _genai_service
