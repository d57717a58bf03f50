"""FastAPI web server: auth routes and a server-side catalog search proxy."""
from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import Depends, FastAPI, Header, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, EmailStr

from music_search.auth_service import AuthService
from music_search.config import Settings
from music_search.credential_store import build_credential_store
from music_search.errors import (
    CatalogError,
    ConfigError,
    DuplicateUser,
    InvalidCredentials,
    MusicSearchError,
    SearchFetchError,
    ValidationError,
)
from music_search.models import Track
from music_search.spotify_service import SearchClient, TokenBroker

logger = logging.getLogger(__name__)

app = FastAPI(title="Music Search")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_STATUS_BY_ERROR = {
    ValidationError: 400,
    InvalidCredentials: 401,
    DuplicateUser: 409,
    CatalogError: 502,
    ConfigError: 500,
}


def status_for(exc: MusicSearchError) -> int:
    for error_type, status in _STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return status
    return 500


@app.exception_handler(MusicSearchError)
async def _music_search_error_handler(request: Request, exc: MusicSearchError) -> JSONResponse:
    return JSONResponse(status_code=status_for(exc), content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = ", ".join(str(err["loc"][-1]) for err in exc.errors())
    return JSONResponse(status_code=422, content={"message": f"Invalid request: {fields}"})


# Request/Response models
class CredentialsRequest(BaseModel):
    email: EmailStr
    password: str


class MessageResponse(BaseModel):
    message: str


class SigninResponse(BaseModel):
    message: str
    email: str
    token: str


class MeResponse(BaseModel):
    email: str


class ArtistInfo(BaseModel):
    name: str


class TrackInfo(BaseModel):
    id: str
    name: str
    artists: list[ArtistInfo] = []
    preview_url: str | None = None

    @classmethod
    def from_track(cls, track: Track) -> TrackInfo:
        return cls(
            id=track.id,
            name=track.name,
            artists=[ArtistInfo(name=a.name) for a in track.artists],
            preview_url=track.preview_url,
        )


class SearchResponse(BaseModel):
    keyword: str
    offset: int
    tracks: list[TrackInfo]


class CatalogProxy:
    """Holds the broker token server-side and answers searches with it."""

    def __init__(self, broker: TokenBroker, client: SearchClient) -> None:
        self.broker = broker
        self.client = client

    def search(self, keyword: str, offset: int) -> list[Track]:
        token = self.broker.token or self.broker.fetch_token()
        logger.debug("Proxying search q=%r offset=%d", keyword, offset)
        try:
            return self.client.search(token, keyword, offset)
        except SearchFetchError as exc:
            if exc.status != 401:
                raise
        # Held token expired: fetch a new one and repeat the search once.
        logger.info("Catalog token rejected; fetching a new one")
        return self.client.search(self.broker.fetch_token(), keyword, offset)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()


@lru_cache(maxsize=1)
def get_auth_service() -> AuthService:
    settings = get_settings()
    store = build_credential_store(settings.mongodb_uri, settings.mongodb_db)
    return AuthService(store, session_ttl_seconds=settings.session_ttl_seconds)


@lru_cache(maxsize=1)
def get_catalog_proxy() -> CatalogProxy:
    return CatalogProxy(TokenBroker(get_settings()), SearchClient())


def _bearer_token(authorization: str | None) -> str:
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise InvalidCredentials("Missing bearer token.")
    return token.strip()


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


@app.post("/signup", response_model=MessageResponse)
def signup(request: CredentialsRequest, auth: AuthService = Depends(get_auth_service)):
    auth.signup(request.email, request.password)
    return MessageResponse(message="User created successfully")


@app.post("/signin", response_model=SigninResponse)
def signin(request: CredentialsRequest, auth: AuthService = Depends(get_auth_service)):
    session = auth.signin(request.email, request.password)
    return SigninResponse(message="Signed in successfully", email=session.email, token=session.token)


@app.get("/me", response_model=MeResponse)
def me(authorization: str | None = Header(default=None), auth: AuthService = Depends(get_auth_service)):
    return MeResponse(email=auth.resolve_session(_bearer_token(authorization)))


@app.post("/signout", response_model=MessageResponse)
def signout(authorization: str | None = Header(default=None), auth: AuthService = Depends(get_auth_service)):
    auth.signout(_bearer_token(authorization))
    return MessageResponse(message="Signed out")


@app.get("/api/search", response_model=SearchResponse)
def search_tracks(
    q: str = Query(..., min_length=1),
    offset: int = Query(default=0, ge=0),
    proxy: CatalogProxy = Depends(get_catalog_proxy),
):
    """Search the catalog with the server-held token."""
    tracks = proxy.search(q, offset)
    return SearchResponse(keyword=q, offset=offset, tracks=[TrackInfo.from_track(t) for t in tracks])
