"""WeatherWear app bootstrap."""

import logging
from typing import Dict, Optional
from uuid import uuid4

from agents.outfit_session import OutfitSession
from agents.safety_analyzer import OutfitSafetyAnalyzer
from memory.accounts import AccountStore
from memory.identity import IdentityProvider
from tools.location_resolver import GeocodingProvider, LocationResolver, WeatherApiGeocoder
from tools.outfit_store import OutfitPersistenceGateway, OutfitStore, SQLiteOutfitStore
from tools.reasoning_client import ReasoningClient, build_reasoning_client
from tools.weather_provider import WeatherApiProvider, WeatherProvider
from weatherwear_app.config import AppConfig
from weatherwear_app.logging_config import configure_logging, get_logger, log_event


LOGGER = get_logger(__name__)


class WeatherWearApp:
    """Wires providers, the analyzer and storage, and hands out sessions.

    Collaborators can be injected for tests; anything omitted is built from
    the config.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        geocoder: GeocodingProvider | None = None,
        weather_provider: WeatherProvider | None = None,
        reasoning_client: ReasoningClient | None = None,
        outfit_store: OutfitStore | None = None,
        account_store: AccountStore | None = None,
    ) -> None:
        self.config = config or AppConfig.from_env()
        configure_logging()

        timeout = self.config.request_timeout_seconds
        self.geocoder = geocoder or WeatherApiGeocoder(
            api_key=self.config.weather_api_key,
            base_url=self.config.weather_endpoint,
            timeout_seconds=timeout,
        )
        self.weather_provider = weather_provider or WeatherApiProvider(
            api_key=self.config.weather_api_key,
            base_url=self.config.weather_endpoint,
            timeout_seconds=timeout,
        )
        self.reasoning_client = reasoning_client or self._build_reasoning_client()
        self.resolver = LocationResolver(self.geocoder, min_chars=self.config.suggestion_min_chars)
        self.analyzer = OutfitSafetyAnalyzer(self.reasoning_client)
        self.outfit_store = outfit_store or SQLiteOutfitStore(
            self.config.outfit_db_path or "data/outfits.db"
        )
        self.outfits = OutfitPersistenceGateway(self.outfit_store)
        self.account_store = account_store or AccountStore(
            self.config.accounts_path or "data/accounts.json"
        )
        self.sessions: Dict[str, OutfitSession] = {}

    def _build_reasoning_client(self) -> ReasoningClient:
        backend = self.config.reasoning_backend
        if backend == "sdk":
            return build_reasoning_client(
                backend,
                self.config.gemini_api_key,
                self.config.model,
                timeout_seconds=self.config.request_timeout_seconds,
            )
        return build_reasoning_client(
            backend,
            self.config.gemini_api_key,
            self.config.model,
            base_url=self.config.gemini_endpoint,
            timeout_seconds=self.config.request_timeout_seconds,
        )

    def start_session(self) -> OutfitSession:
        """Create a session with its own identity context and outfit state."""

        session_id = uuid4().hex
        session = OutfitSession(
            session_id=session_id,
            resolver=self.resolver,
            weather_provider=self.weather_provider,
            analyzer=self.analyzer,
            outfits=self.outfits,
            identity=IdentityProvider(self.account_store),
            strict_garments=self.config.strict_garments,
            debounce_seconds=self.config.suggestion_debounce_seconds,
        )
        self.sessions[session_id] = session
        log_event(LOGGER, level=logging.INFO, event="session_started", session_id=session_id)
        return session

    def get_session(self, session_id: str) -> Optional[OutfitSession]:
        return self.sessions.get(session_id)

    def end_session(self, session_id: str) -> bool:
        """Forget a session and cancel its pending suggestion lookup."""

        session = self.sessions.pop(session_id, None)
        if session is None:
            return False
        session.debouncer.cancel()
        log_event(LOGGER, level=logging.INFO, event="session_ended", session_id=session_id)
        return True


__all__ = ["WeatherWearApp"]
