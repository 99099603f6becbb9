"""FastAPI server exposing the barn tracker services."""

from __future__ import annotations

from typing import List

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from barn_app.app import BarnTrackerApp
from barn_app.logging_config import configure_logging
from logic.blanketing import calculate_blanketing
from logic.errors import InvalidInput, NotAuthorized, RecordNotFound, WeatherUnavailable
from logic.validation import (
    BlanketingRequest,
    CompletionRequest,
    HorseCreateRequest,
    JournalEntryRequest,
    ShavingsDeliveryRequest,
    ShavingsOrderRequest,
    SupplementDeliveryRequest,
    TaskCreateRequest,
)
from models.horse import HorseAttributes, horse_from_raw
from models.weather import WeatherSnapshot
from tools.sqlite_store import new_id


def create_app(barn_app: BarnTrackerApp | None = None) -> FastAPI:
    """Build the ASGI app around an application container (built from env when omitted)."""

    configure_logging()
    container = barn_app or BarnTrackerApp()
    app = FastAPI(title="Barn Tracker", version="0.1.0")
    app.state.barn = container

    @app.exception_handler(RecordNotFound)
    async def _not_found(_: Request, exc: RecordNotFound) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(NotAuthorized)
    async def _forbidden(_: Request, exc: NotAuthorized) -> JSONResponse:
        return JSONResponse(status_code=403, content={"detail": str(exc)})

    @app.exception_handler(InvalidInput)
    async def _invalid(_: Request, exc: InvalidInput) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc), "field": exc.field})

    @app.exception_handler(WeatherUnavailable)
    async def _weather(_: Request, exc: WeatherUnavailable) -> JSONResponse:
        return JSONResponse(
            status_code=503,
            content={"detail": "Weather is unavailable, try again shortly", "reason": exc.reason},
        )

    _register_routes(app)
    return app


def _barn(request: Request) -> BarnTrackerApp:
    return request.app.state.barn


def _register_routes(app: FastAPI) -> None:
    @app.get("/healthz")
    async def healthcheck(barn: BarnTrackerApp = Depends(_barn)) -> dict:
        return {
            "status": "ok",
            "service": "barn-tracker",
            "environment": barn.config.environment or "local",
            "photo_analysis": barn.photo_analyzer is not None,
        }

    @app.post("/blanketing/calculate")
    def calculate(request: BlanketingRequest) -> dict:
        horse = HorseAttributes(**request.horse.model_dump())
        weather = WeatherSnapshot(**request.weather.model_dump())
        return calculate_blanketing(horse, weather).to_dict()

    @app.post("/users/{user_id}/horses", status_code=201)
    def create_horse(user_id: str, request: HorseCreateRequest, barn: BarnTrackerApp = Depends(_barn)) -> dict:
        horse = horse_from_raw({**request.model_dump(), "horse_id": new_id(), "user_id": user_id})
        barn.horse_store.create_horse(horse)
        return {"horse_id": horse.horse_id, "name": horse.name, "hair_length": horse.hair_length.value}

    @app.get("/users/{user_id}/horses")
    def list_horses(user_id: str, barn: BarnTrackerApp = Depends(_barn)) -> List[dict]:
        return [
            {
                "horse_id": horse.horse_id,
                "name": horse.name,
                "age": horse.age,
                "weight": horse.weight,
                "hair_length": horse.hair_length.value,
            }
            for horse in barn.horse_store.list_horses_for_user(user_id)
        ]

    @app.get("/users/{user_id}/horses/{horse_id}/blanketing")
    def horse_blanketing(user_id: str, horse_id: str, barn: BarnTrackerApp = Depends(_barn)) -> dict:
        return barn.blanketing.recommend_for_horse(user_id, horse_id)

    @app.get("/users/{user_id}/blanketing")
    def stable_blanketing(user_id: str, barn: BarnTrackerApp = Depends(_barn)) -> List[dict]:
        return barn.blanketing.recommend_for_stable(user_id)

    @app.post("/users/{user_id}/tasks", status_code=201)
    def create_task(user_id: str, request: TaskCreateRequest, barn: BarnTrackerApp = Depends(_barn)) -> dict:
        return barn.task_tracker.create_task(user_id, request.model_dump()).to_dict()

    @app.get("/users/{user_id}/tasks")
    def list_tasks(user_id: str, barn: BarnTrackerApp = Depends(_barn)) -> List[dict]:
        return [task.to_dict() for task in barn.task_tracker.list_tasks(user_id)]

    @app.post("/users/{user_id}/tasks/{task_id}/completion")
    def toggle_completion(
        user_id: str, task_id: str, request: CompletionRequest, barn: BarnTrackerApp = Depends(_barn)
    ) -> dict:
        task = barn.task_tracker.toggle_completion(user_id, task_id, request.completed, on_date=request.date)
        return task.to_dict()

    @app.get("/users/{user_id}/tasks/{task_id}/history")
    def task_history(user_id: str, task_id: str, barn: BarnTrackerApp = Depends(_barn)) -> List[dict]:
        return [record.to_dict() for record in barn.task_tracker.task_history(user_id, task_id)]

    @app.get("/users/{user_id}/streaks")
    def streaks(user_id: str, barn: BarnTrackerApp = Depends(_barn)) -> List[dict]:
        return barn.task_tracker.streak_report(user_id)

    @app.get("/users/{user_id}/shavings")
    def shavings(user_id: str, barn: BarnTrackerApp = Depends(_barn)) -> dict:
        inventory = barn.shavings_store.get_inventory(user_id)
        return {
            "inventory": inventory.to_dict() if inventory else None,
            "deliveries": [d.to_dict() for d in barn.shavings_store.get_delivery_history(user_id)],
        }

    @app.post("/users/{user_id}/shavings/deliveries", status_code=201)
    def shavings_delivery(
        user_id: str, request: ShavingsDeliveryRequest, barn: BarnTrackerApp = Depends(_barn)
    ) -> dict:
        inventory = barn.shavings_store.record_delivery(
            user_id,
            request.bags_received,
            request.delivered_at,
            supplier=request.supplier,
            notes=request.notes,
        )
        return inventory.to_dict()

    @app.post("/users/{user_id}/shavings/orders")
    def shavings_order(user_id: str, request: ShavingsOrderRequest, barn: BarnTrackerApp = Depends(_barn)) -> dict:
        inventory = barn.shavings_store.mark_order_placed(
            user_id, barn.today(), expected_delivery_date=request.expected_delivery_date
        )
        return inventory.to_dict()

    @app.post("/users/{user_id}/supplements/{supplement_id}/deliveries")
    def supplement_delivery(
        user_id: str,
        supplement_id: str,
        request: SupplementDeliveryRequest,
        barn: BarnTrackerApp = Depends(_barn),
    ) -> dict:
        supplement = barn.supplement_store.record_delivery(user_id, supplement_id, request.quantity, barn.today())
        return supplement.to_dict()

    @app.post("/users/{user_id}/journal", status_code=201)
    def create_journal_entry(
        user_id: str, request: JournalEntryRequest, barn: BarnTrackerApp = Depends(_barn)
    ) -> dict:
        return barn.journal.create_entry(user_id, request.model_dump()).model_dump(mode="json")

    @app.get("/users/{user_id}/journal")
    def list_journal(user_id: str, category: str | None = None, barn: BarnTrackerApp = Depends(_barn)) -> List[dict]:
        try:
            entries = barn.journal.list_entries(user_id, category=category)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return [entry.model_dump(mode="json") for entry in entries]


def get_app() -> FastAPI:
    """Expose a FastAPI instance for ASGI servers."""

    return create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.api:get_app", factory=True, host="0.0.0.0", port=8080, reload=False)
