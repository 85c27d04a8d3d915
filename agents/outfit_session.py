"""Per-user session controller tying location, weather, outfit and analysis together."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from agents.safety_analyzer import OutfitSafetyAnalyzer
from logic.outfit_state import OutfitState
from logic.validation import ensure_ready_for_analysis
from memory.identity import (
    SIGN_IN_FAILED,
    IdentityProvider,
    UserIdentity,
    auth_error_message,
    validate_sign_up_form,
)
from models.errors import AuthError, NotFound, ValidationError, WeatherWearError
from models.outfit import OutfitSelection, SavedOutfitRecord
from models.risk_report import RiskReport
from models.taxonomy import LayerCategory
from models.weather import Location, LocationCandidate, WeatherSnapshot
from tools.location_resolver import LocationResolver, SuggestionDebouncer
from tools.outfit_store import OutfitPersistenceGateway
from tools.weather_provider import WeatherProvider
from weatherwear_app.logging_config import get_logger, log_event, operation_context


LOGGER = get_logger(__name__)

SessionListener = Callable[[str, Any], None]


@dataclass(frozen=True)
class Notice:
    """A single user-visible message produced at an async boundary."""

    level: str
    message: str
    kind: str = ""


class OutfitSession:
    """State for one interactive session.

    Each operation catches its own failures and turns them into a
    :class:`Notice`; nothing raises past this class. A report only ever
    describes the current location, weather and outfit: changing any of them
    retracts it until analysis is requested again.
    Weather fetches and analyses carry a request token so that a superseded
    call's result is discarded on arrival.
    """

    def __init__(
        self,
        *,
        session_id: str,
        resolver: LocationResolver,
        weather_provider: WeatherProvider,
        analyzer: OutfitSafetyAnalyzer,
        outfits: OutfitPersistenceGateway,
        identity: IdentityProvider,
        strict_garments: bool = True,
        debounce_seconds: float = 0.3,
    ) -> None:
        self.session_id = session_id
        self.resolver = resolver
        self.weather_provider = weather_provider
        self.analyzer = analyzer
        self.outfits = outfits
        self.identity = identity
        self.debouncer = SuggestionDebouncer(resolver, delay_seconds=debounce_seconds)
        self.outfit = OutfitState(strict=strict_garments)

        self.location: Optional[Location] = None
        self.weather: Optional[WeatherSnapshot] = None
        self.report: Optional[RiskReport] = None
        self.analyzing = False
        self.notices: List[Notice] = []
        self.last_error: Optional[WeatherWearError] = None

        self._weather_token = 0
        self._analysis_token = 0
        self._listeners: List[SessionListener] = []
        self.outfit.subscribe(self._on_outfit_changed)

    # -- events -------------------------------------------------------------

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: str, payload: Any = None) -> None:
        for listener in list(self._listeners):
            listener(event, payload)

    def _notice(self, level: str, message: str, kind: str = "") -> Notice:
        notice = Notice(level=level, message=message, kind=kind)
        self.notices.append(notice)
        self._emit("notice", notice)
        return notice

    def _fail(self, exc: WeatherWearError, message: Optional[str] = None) -> None:
        self.last_error = exc
        log_event(
            LOGGER,
            level=logging.WARNING,
            event="session_operation_failed",
            session_id=self.session_id,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        self._notice("error", message or exc.message, kind=type(exc).__name__)

    def pop_notices(self) -> List[Notice]:
        notices, self.notices = self.notices, []
        return notices

    # -- location -----------------------------------------------------------

    def request_suggestions(self, query: str) -> asyncio.Task:
        return self.debouncer.request(query)

    async def suggestions(self) -> List[LocationCandidate]:
        return await self.debouncer.settle()

    @property
    def suggestions_query(self) -> str:
        """The query the currently shown suggestions were fetched for."""

        return self.debouncer.results_query

    async def search_location(self, query: str) -> Optional[Location]:
        """Resolve free text to the first match and confirm it."""

        with operation_context("session:search_location", session_id=self.session_id, query=query):
            try:
                location = await self.resolver.resolve(query)
            except NotFound as exc:
                self._fail(exc, "Location not found")
                return None
            except WeatherWearError as exc:
                self._fail(exc, "Failed to search location")
                return None
            self.debouncer.cancel()
            await self.select_location(location)
            return location

    async def select_location(self, location: Location | LocationCandidate) -> Optional[WeatherSnapshot]:
        """Replace the confirmed location and fetch its weather."""

        if isinstance(location, LocationCandidate):
            location = location.to_location()
        self.location = location
        self._set_weather(None)
        self._emit("location_changed", location)
        return await self.refresh_weather()

    async def refresh_weather(self) -> Optional[WeatherSnapshot]:
        if self.location is None:
            self._fail(ValidationError("Please select a location first"))
            return None

        self._weather_token += 1
        token = self._weather_token
        location = self.location
        with operation_context("session:refresh_weather", session_id=self.session_id, city=location.name):
            try:
                snapshot = await self.weather_provider.fetch(location)
            except WeatherWearError as exc:
                if token == self._weather_token:
                    self._set_weather(None)
                    self._fail(exc, "Failed to fetch weather data")
                return None
        if token != self._weather_token:
            return None
        self._set_weather(snapshot)
        return snapshot

    def _set_weather(self, snapshot: Optional[WeatherSnapshot]) -> None:
        self.weather = snapshot
        self._retract_report()
        self._emit("weather_changed", snapshot)

    # -- outfit -------------------------------------------------------------

    def toggle(self, category: str | LayerCategory, garment_id: str) -> Optional[OutfitSelection]:
        try:
            return self.outfit.toggle(category, garment_id)
        except ValueError as exc:
            self._fail(ValidationError(str(exc)))
        except WeatherWearError as exc:
            self._fail(exc)
        return None

    def _on_outfit_changed(self, selection: OutfitSelection) -> None:
        self._retract_report()
        self._emit("outfit_changed", selection)

    # -- analysis -----------------------------------------------------------

    async def analyze(self) -> Optional[RiskReport]:
        """Run a fresh analysis for the current location, weather and outfit."""

        selection = self.outfit.selection
        try:
            ensure_ready_for_analysis(self.location, self.weather, selection)
        except ValidationError as exc:
            self._fail(exc)
            return None

        self._retract_report()
        token = self._analysis_token
        city = self.location.name
        weather = self.weather
        self.analyzing = True
        try:
            with operation_context("session:analyze", session_id=self.session_id, city=city):
                report = await self.analyzer.analyze(city, weather, selection)
        except WeatherWearError as exc:
            if token == self._analysis_token:
                self._retract_report()
                self._fail(exc)
            return None
        finally:
            if token == self._analysis_token:
                self.analyzing = False

        if token != self._analysis_token:
            return None
        self.report = report
        self._emit("report_changed", report)
        return report

    def _retract_report(self) -> None:
        self._analysis_token += 1
        self.analyzing = False
        if self.report is None:
            return
        self.report = None
        self._emit("report_changed", None)

    # -- persistence --------------------------------------------------------

    def _require_user(self) -> Optional[UserIdentity]:
        user = self.identity.current_user
        if user is None:
            self._fail(ValidationError("Sign in to save outfits"))
        return user

    async def save_outfit(self) -> Optional[str]:
        user = self._require_user()
        if user is None:
            return None
        selection = self.outfit.selection
        try:
            ensure_ready_for_analysis(self.location, self.weather, selection)
            record_id = await self.outfits.save(
                user.user_id,
                self.location.name,
                self.weather,
                sorted(selection.inner_layers),
                sorted(selection.outer_layers),
            )
        except ValidationError as exc:
            self._fail(exc)
            return None
        except WeatherWearError as exc:
            self._fail(exc, f"Failed to save outfit: {exc.message}")
            return None
        self._notice("success", "Outfit saved successfully!")
        return record_id

    async def list_saved(self) -> List[SavedOutfitRecord]:
        user = self.identity.current_user
        if user is None:
            return []
        try:
            return await self.outfits.list_for(user.user_id)
        except WeatherWearError as exc:
            self._fail(exc, "Failed to load saved outfits")
            return []

    async def _owned_record(self, record_id: str) -> Optional[SavedOutfitRecord]:
        user = self._require_user()
        if user is None:
            return None
        record = await self.outfits.get(record_id)
        if record is None or record.user_id != user.user_id:
            raise NotFound("Saved outfit not found")
        return record

    async def delete_saved(self, record_id: str) -> bool:
        try:
            record = await self._owned_record(record_id)
            if record is None:
                return False
            await self.outfits.delete(record.id)
        except WeatherWearError as exc:
            self._fail(exc, "Failed to delete outfit")
            return False
        self._notice("success", "Outfit deleted successfully")
        return True

    async def restore(self, record_id: str) -> bool:
        """Load a saved outfit: seed the layers and re-resolve its city.

        Coordinates are not stored, so the city is geocoded again and fresh
        weather is fetched. Analysis is not started automatically.
        """

        try:
            record = await self._owned_record(record_id)
            if record is None:
                return False
            self.outfit.seed(record.inner_layers, record.outer_layers)
        except WeatherWearError as exc:
            self._fail(exc, f"Failed to load saved outfit: {exc.message}")
            return False
        self._notice("info", "Loading saved outfit...")
        location = await self.search_location(record.city)
        return location is not None and self.weather is not None

    # -- identity -----------------------------------------------------------

    async def sign_up(self, email: str, password: str, confirm_password: str) -> Optional[UserIdentity]:
        try:
            validate_sign_up_form(password, confirm_password)
            user = await self.identity.sign_up(email, password)
        except AuthError as exc:
            self._fail(exc, auth_error_message(exc.code))
            return None
        except ValidationError as exc:
            self._fail(exc)
            return None
        except WeatherWearError as exc:
            self._fail(exc, f"Failed to create account: {exc.message}")
            return None
        self._notice("success", "Account created successfully!")
        return user

    async def sign_in(self, email: str, password: str) -> Optional[UserIdentity]:
        try:
            user = await self.identity.sign_in(email, password)
        except AuthError as exc:
            self._fail(exc, auth_error_message(exc.code, operation="sign_in"))
            return None
        except WeatherWearError as exc:
            self._fail(exc, SIGN_IN_FAILED)
            return None
        self._notice("success", "Successfully signed in!")
        return user

    async def sign_out(self) -> None:
        await self.identity.sign_out()
        self._notice("success", "Logged out successfully")

    # -- display ------------------------------------------------------------

    def snapshot(self) -> dict:
        """Serialisable view of everything currently displayed."""

        selection = self.outfit.selection
        return {
            "session_id": self.session_id,
            "location": None
            if self.location is None
            else {"name": self.location.name, "lat": self.location.lat, "lng": self.location.lng},
            "weather": None
            if self.weather is None
            else {**self.weather.to_dict(), "icon": self.weather.icon, "summary": self.weather.summary()},
            "outfit": {
                "inner_layers": sorted(selection.inner_layers),
                "outer_layers": sorted(selection.outer_layers),
                "inner_summary": selection.describe_inner(),
                "outer_summary": selection.describe_outer(),
            },
            "report": None if self.report is None else self.report.to_payload(),
            "user": None if self.identity.current_user is None else self.identity.current_user.email,
        }


__all__ = ["Notice", "OutfitSession"]
