"""FastAPI application factory."""

import base64
import binascii
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from logwell.api.models import (
    AnalysisRequest,
    DateSelect,
    EntryCreate,
    EntryUpdate,
    FoodCreate,
    FoodUpdate,
    GoalsPayload,
    NotesUpdate,
    ProfilePayload,
    RecipeCreate,
    WaterUpdate,
)
from logwell.app_logging import configure_logging
from logwell.containers import AppContainer
from logwell.domain.foods import Recipe, RecipeIngredient
from logwell.domain.logs import DailyLog
from logwell.domain.nutrition import NutritionGoals
from logwell.errors import FoodNotFoundError, PersistenceError, ProfileNotFoundError
from logwell.services.analysis import to_food_payload
from logwell.services.goals import DEFAULT_GOALS
from logwell.services.logs import group_entries_by_hour, sort_entries_chronologically
from logwell.services.nutrition_math import calculate_entry_nutrition


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(debug=container.settings.debug)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            await app.state.container.initialize()
        except PersistenceError:
            logger.exception("Failed to load stored data")
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(ProfileNotFoundError)
    @app.exception_handler(FoodNotFoundError)
    async def not_found(_request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ValueError)
    async def invalid_input(_request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(PersistenceError)
    async def storage_unavailable(
        _request: Request, exc: PersistenceError
    ) -> JSONResponse:
        logger.warning("Storage failure: %s", exc)
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.delete("/data")
    async def clear_data(request: Request) -> dict[str, str]:
        """Remove all stored foods, logs and the profile."""
        await request.app.state.container.clear_all_data()
        logger.info("Cleared all stored data")
        return {"status": "ok"}

    @app.get("/log")
    async def current_log(request: Request) -> dict[str, object]:
        """Return the selected date's log with read-time projections."""
        state_container: AppContainer = request.app.state.container
        return _log_view(
            state_container.log_store.selected_date,
            state_container.log_store.current_day_log,
        )

    @app.post("/log/date")
    async def select_date(body: DateSelect, request: Request) -> dict[str, object]:
        """Switch the log to a date."""
        log_store = request.app.state.container.log_store
        daily_log = await log_store.set_selected_date(body.date.isoformat())
        return _log_view(log_store.selected_date, daily_log)

    @app.post("/log/today")
    async def today(request: Request) -> dict[str, object]:
        """Switch the log to today."""
        log_store = request.app.state.container.log_store
        daily_log = await log_store.go_to_today()
        return _log_view(log_store.selected_date, daily_log)

    @app.post("/log/previous")
    async def previous_day(request: Request) -> dict[str, object]:
        """Switch the log to the previous day."""
        log_store = request.app.state.container.log_store
        daily_log = await log_store.go_to_previous_day()
        return _log_view(log_store.selected_date, daily_log)

    @app.post("/log/next")
    async def next_day(request: Request) -> dict[str, object]:
        """Switch the log to the next day."""
        log_store = request.app.state.container.log_store
        daily_log = await log_store.go_to_next_day()
        return _log_view(log_store.selected_date, daily_log)

    @app.post("/log/entries", status_code=status.HTTP_201_CREATED)
    async def add_entry(body: EntryCreate, request: Request) -> dict[str, object]:
        """Log a saved food on the selected date."""
        state_container: AppContainer = request.app.state.container
        food = state_container.food_library.get_food(body.food_id)
        entry = await state_container.log_store.add_entry(
            food,
            quantity=body.quantity,
            meal_type=body.meal_type,
            notes=body.notes,
        )
        return {"entry": entry, "nutrition": calculate_entry_nutrition(entry)}

    @app.patch("/log/entries/{entry_id}")
    async def update_entry(
        entry_id: str, body: EntryUpdate, request: Request
    ) -> dict[str, object]:
        """Update quantity, meal type or notes of an entry."""
        log_store = request.app.state.container.log_store
        patch = body.model_dump(exclude_unset=True)
        entry = await log_store.update_entry(entry_id, patch)
        if entry is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return {"entry": entry, "nutrition": calculate_entry_nutrition(entry)}

    @app.delete("/log/entries/{entry_id}")
    async def delete_entry(entry_id: str, request: Request) -> dict[str, object]:
        """Delete an entry from the selected date."""
        log_store = request.app.state.container.log_store
        await log_store.delete_entry(entry_id)
        return _log_view(log_store.selected_date, log_store.current_day_log)

    @app.put("/log/notes")
    async def set_notes(body: NotesUpdate, request: Request) -> dict[str, object]:
        """Set the selected date's notes."""
        log_store = request.app.state.container.log_store
        daily_log = await log_store.set_day_notes(body.notes)
        return _log_view(log_store.selected_date, daily_log)

    @app.put("/log/water")
    async def set_water(body: WaterUpdate, request: Request) -> dict[str, object]:
        """Set the selected date's water intake."""
        log_store = request.app.state.container.log_store
        daily_log = await log_store.set_water_intake(body.water_intake)
        return _log_view(log_store.selected_date, daily_log)

    @app.get("/log/summary")
    async def day_summary(request: Request) -> dict[str, object]:
        """Return the selected date's progress against the profile goals."""
        state_container: AppContainer = request.app.state.container
        profile = state_container.profile_store.user_profile
        goals = profile.goals if profile else DEFAULT_GOALS
        return {"summary": state_container.log_store.day_summary(goals)}

    @app.get("/profile")
    async def get_profile(request: Request) -> dict[str, object]:
        """Return the user profile, if created."""
        return {"profile": request.app.state.container.profile_store.user_profile}

    @app.post("/profile", status_code=status.HTTP_201_CREATED)
    async def create_profile(
        body: ProfilePayload, request: Request
    ) -> dict[str, object]:
        """Create the profile from onboarding data."""
        profile_store = request.app.state.container.profile_store
        profile = await profile_store.create_user_profile(_profile_patch(body))
        return {"profile": profile}

    @app.patch("/profile")
    async def update_profile(
        body: ProfilePayload, request: Request
    ) -> dict[str, object]:
        """Merge changes into the profile."""
        profile_store = request.app.state.container.profile_store
        profile = await profile_store.update_user_profile(_profile_patch(body))
        return {"profile": profile}

    @app.put("/profile/goals")
    async def set_goals(body: GoalsPayload, request: Request) -> dict[str, object]:
        """Override the profile goals by hand."""
        profile_store = request.app.state.container.profile_store
        profile = await profile_store.update_nutrition_goals(
            NutritionGoals(**body.model_dump())
        )
        return {"profile": profile}

    @app.get("/foods")
    async def list_foods(request: Request, q: str | None = None) -> dict[str, object]:
        """Search saved foods."""
        return {"foods": request.app.state.container.food_library.search_foods(q)}

    @app.post("/foods", status_code=status.HTTP_201_CREATED)
    async def add_food(body: FoodCreate, request: Request) -> dict[str, object]:
        """Save a food."""
        food_library = request.app.state.container.food_library
        return {"food": await food_library.add_food(body.model_dump())}

    @app.patch("/foods/{food_id}")
    async def update_food(
        food_id: str, body: FoodUpdate, request: Request
    ) -> dict[str, object]:
        """Update a saved food."""
        food_library = request.app.state.container.food_library
        patch = body.model_dump(exclude_unset=True)
        food = await food_library.update_food(food_id, patch)
        return {"food": food}

    @app.delete("/foods/{food_id}")
    async def delete_food(food_id: str, request: Request) -> dict[str, str]:
        """Delete a saved food."""
        await request.app.state.container.food_library.delete_food(food_id)
        return {"status": "ok"}

    @app.post("/recipes", status_code=status.HTTP_201_CREATED)
    async def create_recipe(body: RecipeCreate, request: Request) -> dict[str, object]:
        """Build a recipe from saved foods and save it as a food."""
        state_container: AppContainer = request.app.state.container
        recipe = Recipe(
            name=body.name,
            servings=body.servings,
            serving_description=body.serving_description,
            ingredients=[
                RecipeIngredient(
                    food=state_container.food_library.get_food(item.food_id),
                    quantity=item.quantity,
                )
                for item in body.ingredients
            ],
        )
        return {"food": await state_container.recipe_service.save_recipe(recipe)}

    @app.get("/stats/week")
    async def week_stats(
        request: Request, anchor: str | None = None
    ) -> dict[str, object]:
        """Return the week containing anchor (default: selected date)."""
        state_container: AppContainer = request.app.state.container
        day = anchor or state_container.log_store.selected_date
        return {"summary": await state_container.stats_service.get_week(day)}

    @app.get("/stats/month")
    async def month_stats(
        request: Request, anchor: str | None = None
    ) -> dict[str, object]:
        """Return the month containing anchor (default: selected date)."""
        state_container: AppContainer = request.app.state.container
        day = anchor or state_container.log_store.selected_date
        return {"summary": await state_container.stats_service.get_month(day)}

    @app.get("/products/{barcode}")
    async def lookup_product(barcode: str, request: Request) -> dict[str, object]:
        """Look up a barcode and return a candidate food."""
        product_service = request.app.state.container.product_service
        product = await product_service.lookup(barcode)
        if product is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return {"food": product}

    @app.post("/analysis")
    async def analyze_food(
        body: AnalysisRequest, request: Request
    ) -> dict[str, object]:
        """Analyze a food description or photo and return a candidate food."""
        analysis_service = request.app.state.container.analysis_service
        if analysis_service is None:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Food analysis is not configured",
            )
        image_bytes = _decode_image(body.image_base64)
        analysis = await analysis_service.analyze(
            text=body.text, image_bytes=image_bytes
        )
        return {
            "analysis": analysis.model_dump(by_alias=True),
            "food": to_food_payload(analysis),
        }

    return app


def _log_view(selected_date: str, daily_log: DailyLog | None) -> dict[str, object]:
    entries = daily_log.entries if daily_log else []
    ordered = sort_entries_chronologically(entries)
    return {
        "date": selected_date,
        "log": daily_log,
        "entries": [
            {"entry": entry, "nutrition": calculate_entry_nutrition(entry)}
            for entry in ordered
        ],
        "by_hour": {
            str(hour): [entry.id for entry in bucket]
            for hour, bucket in group_entries_by_hour(entries).items()
        },
    }


def _profile_patch(body: ProfilePayload) -> dict[str, object]:
    return body.model_dump(exclude_unset=True)


def _decode_image(image_base64: str | None) -> bytes | None:
    if image_base64 is None:
        return None
    try:
        return base64.b64decode(image_base64, validate=True)
    except binascii.Error as exc:
        raise ValueError("Image must be valid base64") from exc
