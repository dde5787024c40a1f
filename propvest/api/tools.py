"""
AI tool API endpoints.

Photo editing, video tours, market research and the voice assistant relay.
Failures surface as a generic notice; nothing here is retried.
"""

import asyncio
import logging
from typing import List, Optional

import pybase64
from fastapi import APIRouter, Depends, HTTPException, Response, WebSocket, WebSocketDisconnect
from google.genai import types
from pydantic import BaseModel

from propvest.services.genai import (
    DEFAULT_VIDEO_PROMPT,
    PCM_MIME_TYPE,
    VOICE_SYSTEM_INSTRUCTION,
    GenAIError,
    GenAIService,
    GenAIUnavailableError,
    get_genai_service,
    pcm_to_blob,
)
from propvest.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter()


class ImageEditInput(BaseModel):
    """Input for a photo edit."""

    image_base64: str
    prompt: str


class ImageEditResponse(BaseModel):
    image: str


class VideoInput(BaseModel):
    """Input for a video tour."""

    image_base64: str
    prompt: str = DEFAULT_VIDEO_PROMPT


class ResearchInput(BaseModel):
    query: str


class ResearchSource(BaseModel):
    title: Optional[str] = None
    uri: Optional[str] = None


class ResearchResponse(BaseModel):
    text: str
    sources: List[ResearchSource]


class VoiceConfigResponse(BaseModel):
    model: str
    voice: str
    system_instruction: str
    input_mime_type: str


def _raise_for(e: GenAIError, notice: str) -> HTTPException:
    if isinstance(e, GenAIUnavailableError):
        return HTTPException(status_code=503, detail="AI features are not configured")
    return HTTPException(status_code=502, detail=notice)


@router.post("/image-edit", response_model=ImageEditResponse)
async def edit_image(
    inputs: ImageEditInput, service: GenAIService = Depends(get_genai_service)
):
    """Edit a listing photo from a text instruction."""
    try:
        image = await service.edit_image(inputs.image_base64, inputs.prompt)
    except GenAIError as e:
        raise _raise_for(e, "Failed to generate image edit.")
    return ImageEditResponse(image=image)


@router.post("/video")
async def generate_video(
    inputs: VideoInput, service: GenAIService = Depends(get_genai_service)
):
    """Generate a video tour from a listing photo. Takes minutes."""
    try:
        video_uri = await service.generate_video(inputs.image_base64, inputs.prompt)
        content = await service.fetch_video(video_uri)
    except GenAIError as e:
        raise _raise_for(
            e, "Failed to generate video. Video generation requires a paid API key."
        )
    return Response(content=content, media_type="video/mp4")


@router.post("/research", response_model=ResearchResponse)
async def market_research(
    inputs: ResearchInput, service: GenAIService = Depends(get_genai_service)
):
    """Answer a market question with cited web sources."""
    try:
        return await service.market_research(inputs.query)
    except GenAIError as e:
        raise _raise_for(e, "Market research failed.")


@router.get("/voice/config", response_model=VoiceConfigResponse)
async def voice_config():
    """Describe the voice assistant session."""
    return VoiceConfigResponse(
        model=settings.voice_model,
        voice=settings.voice_name,
        system_instruction=VOICE_SYSTEM_INSTRUCTION,
        input_mime_type=PCM_MIME_TYPE,
    )


async def _forward_microphone(websocket: WebSocket, session) -> None:
    """
    Browser microphone chunks -> live session, until the client says close.

    A chunk is either ``{"samples": [float, ...]}`` straight from the audio
    graph or an already encoded ``{"data", "mimeType"}`` PCM blob.
    """
    while True:
        message = await websocket.receive_json()
        if message.get("type") == "close":
            return
        if "samples" in message:
            message = pcm_to_blob(message["samples"])
        await session.send_realtime_input(
            audio=types.Blob(
                data=pybase64.b64decode(message["data"]),
                mime_type=message.get("mimeType", PCM_MIME_TYPE),
            )
        )


async def _forward_speaker(websocket: WebSocket, session) -> None:
    """Live session audio and interruptions -> browser."""
    while True:
        async for message in session.receive():
            content = message.server_content
            if content is None:
                continue
            if content.interrupted:
                await websocket.send_json({"type": "interrupted"})
            if content.model_turn is None:
                continue
            for part in content.model_turn.parts or []:
                if part.inline_data is not None and part.inline_data.data:
                    await websocket.send_json(
                        {
                            "type": "audio",
                            "data": pybase64.b64encode(part.inline_data.data).decode("ascii"),
                        }
                    )


@router.websocket("/voice")
async def voice_session(
    websocket: WebSocket, service: GenAIService = Depends(get_genai_service)
):
    """Relay microphone audio to the voice assistant and stream its replies."""
    await websocket.accept()
    try:
        async with service.connect_live_session() as session:
            tasks = [
                asyncio.create_task(_forward_microphone(websocket, session)),
                asyncio.create_task(_forward_speaker(websocket, session)),
            ]
            done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            for task in done:
                task.result()
        await websocket.send_json({"type": "closed"})
        await websocket.close()
    except WebSocketDisconnect:
        logger.info("Voice client disconnected")
    except GenAIUnavailableError:
        await websocket.send_json({"type": "error", "detail": "AI features are not configured"})
        await websocket.close()
    except Exception as e:
        logger.error(f"Voice session error: {str(e)}")
        await websocket.send_json({"type": "error", "detail": "Voice session failed."})
        await websocket.close()
