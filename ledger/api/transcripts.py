"""YouTube transcript endpoint, usable as the TRANSCRIPT_API_URL provider."""

import secrets

from fastapi import APIRouter, Depends

from ledger.api.deps import CaptionsDep, SettingsDep
from ledger.auth.middleware import API_KEY_HEADER, bearer_token
from ledger.engine.transcripts import is_youtube_url
from ledger.errors import UnauthorizedError, ValidationError
from ledger.schemas.evidence import TranscriptRequest, TranscriptResponse

router = APIRouter()


async def require_transcript_key(
    settings: SettingsDep,
    auth_header: str | None = Depends(API_KEY_HEADER),
) -> None:
    """Open when YOUTUBE_TRANSCRIPT_API_KEY is unset, otherwise bearer key required."""
    expected = settings.youtube_transcript_api_key
    if not expected:
        return
    token = bearer_token(auth_header)
    if token is None or not secrets.compare_digest(token.encode(), expected.encode()):
        raise UnauthorizedError("Invalid transcript API key")


@router.post(
    "/youtube-transcript",
    response_model=TranscriptResponse,
    dependencies=[Depends(require_transcript_key)],
)
async def youtube_transcript(body: TranscriptRequest, captions: CaptionsDep):
    """Fetch a video's captions as one line of text."""
    if not is_youtube_url(body.url):
        raise ValidationError("URL must be a YouTube video (youtube.com or youtu.be)")
    text = await captions.fetch_text(body.url)
    return TranscriptResponse(text=text)
