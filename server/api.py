"""FastAPI server exposing WeatherWear session operations."""

from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from pydantic import BaseModel, Field

from agents.outfit_session import OutfitSession
from models.taxonomy import Garment, LayerCategory
from models.weather import Location
from weatherwear_app.app import WeatherWearApp
from weatherwear_app.logging_config import configure_logging


class LocationRequest(BaseModel):
    """Either a free-text query or an already geocoded point."""

    query: Optional[str] = Field(None, description="Free-text location search")
    name: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None


class ToggleRequest(BaseModel):
    category: LayerCategory
    garment_id: str = Field(..., min_length=1)


class SignUpRequest(BaseModel):
    email: str
    password: str
    confirm_password: str


class SignInRequest(BaseModel):
    email: str
    password: str


def create_app(weatherwear: WeatherWearApp | None = None) -> FastAPI:
    """Build the API; the WeatherWear app is created on first use if not given."""

    configure_logging()
    api = FastAPI(title="WeatherWear", version="0.1.0")
    api.state.weatherwear = weatherwear

    def get_weatherwear(request: Request) -> WeatherWearApp:
        if request.app.state.weatherwear is None:
            request.app.state.weatherwear = WeatherWearApp()
        return request.app.state.weatherwear

    def get_session(session_id: str, ww: WeatherWearApp = Depends(get_weatherwear)) -> OutfitSession:
        session = ww.get_session(session_id)
        if session is None:
            raise HTTPException(status_code=404, detail="Unknown session")
        return session

    def respond(session: OutfitSession, ok: bool = True, **extra: object) -> dict:
        notices = session.pop_notices()
        if not ok:
            errors = [notice.message for notice in notices if notice.level == "error"]
            raise HTTPException(status_code=400, detail=errors[-1] if errors else "Request failed")
        return {
            "status": "ok",
            "session": session.snapshot(),
            "notices": [notice.__dict__ for notice in notices],
            **extra,
        }

    @api.get("/healthz")
    async def healthcheck(ww: WeatherWearApp = Depends(get_weatherwear)) -> dict:
        """Lightweight readiness check."""

        return {
            "status": "ok",
            "service": "weatherwear",
            "environment": ww.config.environment or "local",
            "model": ww.config.model,
        }

    @api.get("/garments")
    async def list_garments() -> dict:
        return {
            category.value: [
                {"id": garment.garment_id, "name": garment.display_name}
                for garment in Garment
                if garment.category is category
            ]
            for category in LayerCategory
        }

    @api.post("/sessions")
    async def create_session(ww: WeatherWearApp = Depends(get_weatherwear)) -> dict:
        session = ww.start_session()
        return {"session_id": session.session_id}

    @api.get("/sessions/{session_id}")
    async def read_session(session: OutfitSession = Depends(get_session)) -> dict:
        return respond(session)

    @api.delete("/sessions/{session_id}")
    async def end_session(session_id: str, ww: WeatherWearApp = Depends(get_weatherwear)) -> dict:
        if not ww.end_session(session_id):
            raise HTTPException(status_code=404, detail="Unknown session")
        return {"status": "ended", "session_id": session_id}

    @api.get("/sessions/{session_id}/suggestions")
    async def suggestions(q: str, session: OutfitSession = Depends(get_session)) -> dict:
        session.request_suggestions(q)
        results = await session.suggestions()
        return {
            "requested": q,
            "query": session.suggestions_query,
            "suggestions": [
                {"name": item.name, "country": item.country, "lat": item.lat, "lon": item.lon, "label": item.label}
                for item in results
            ],
        }

    @api.post("/sessions/{session_id}/location")
    async def set_location(request: LocationRequest, session: OutfitSession = Depends(get_session)) -> dict:
        if request.query:
            location = await session.search_location(request.query)
            return respond(session, ok=location is not None and session.weather is not None)
        if request.name and request.lat is not None and request.lng is not None:
            weather = await session.select_location(
                Location(name=request.name, lat=request.lat, lng=request.lng)
            )
            return respond(session, ok=weather is not None)
        raise HTTPException(status_code=422, detail="Provide a query or a name with lat/lng")

    @api.post("/sessions/{session_id}/outfit/toggle")
    async def toggle_garment(request: ToggleRequest, session: OutfitSession = Depends(get_session)) -> dict:
        selection = session.toggle(request.category, request.garment_id)
        return respond(session, ok=selection is not None)

    @api.post("/sessions/{session_id}/analyze")
    async def analyze(session: OutfitSession = Depends(get_session)) -> dict:
        report = await session.analyze()
        return respond(session, ok=report is not None)

    @api.post("/sessions/{session_id}/outfits")
    async def save_outfit(session: OutfitSession = Depends(get_session)) -> dict:
        record_id = await session.save_outfit()
        return respond(session, ok=record_id is not None, record_id=record_id)

    @api.get("/sessions/{session_id}/outfits")
    async def list_outfits(session: OutfitSession = Depends(get_session)) -> dict:
        records = await session.list_saved()
        return respond(session, outfits=[record.to_dict() for record in records])

    @api.delete("/sessions/{session_id}/outfits/{record_id}")
    async def delete_outfit(record_id: str, session: OutfitSession = Depends(get_session)) -> dict:
        deleted = await session.delete_saved(record_id)
        return respond(session, ok=deleted)

    @api.post("/sessions/{session_id}/restore/{record_id}")
    async def restore_outfit(record_id: str, session: OutfitSession = Depends(get_session)) -> dict:
        restored = await session.restore(record_id)
        return respond(session, ok=restored)

    @api.post("/sessions/{session_id}/auth/sign-up")
    async def sign_up(request: SignUpRequest, session: OutfitSession = Depends(get_session)) -> dict:
        user = await session.sign_up(request.email, request.password, request.confirm_password)
        return respond(session, ok=user is not None)

    @api.post("/sessions/{session_id}/auth/sign-in")
    async def sign_in(request: SignInRequest, session: OutfitSession = Depends(get_session)) -> dict:
        user = await session.sign_in(request.email, request.password)
        return respond(session, ok=user is not None)

    @api.post("/sessions/{session_id}/auth/sign-out")
    async def sign_out(session: OutfitSession = Depends(get_session)) -> dict:
        await session.sign_out()
        return respond(session)

    return api


app = create_app()


def get_app() -> FastAPI:
    """Expose the FastAPI instance for ASGI servers."""

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.api:app", host="0.0.0.0", port=8080, reload=False)
