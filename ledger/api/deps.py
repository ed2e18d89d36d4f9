"""Dependencies for process-lifetime clients held on app.state."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ledger.config import Settings
from ledger.engine.ai import ModelClient
from ledger.engine.transcripts import CaptionSource, TranscriptFetcher
from ledger.storage.objects import SupabaseStorage


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_maker(request: Request) -> async_sessionmaker[AsyncSession]:
    return request.app.state.session_maker


def get_model_client(request: Request) -> ModelClient:
    return request.app.state.model_client


def get_storage(request: Request) -> SupabaseStorage:
    return request.app.state.storage


def get_transcripts(request: Request) -> TranscriptFetcher:
    return request.app.state.transcripts


def get_captions(request: Request) -> CaptionSource:
    return request.app.state.captions


SettingsDep = Annotated[Settings, Depends(get_settings)]
SessionMakerDep = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_maker)]
ModelClientDep = Annotated[ModelClient, Depends(get_model_client)]
StorageDep = Annotated[SupabaseStorage, Depends(get_storage)]
TranscriptsDep = Annotated[TranscriptFetcher, Depends(get_transcripts)]
CaptionsDep = Annotated[CaptionSource, Depends(get_captions)]
