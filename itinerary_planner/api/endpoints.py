"""
API Endpoints - itinerary search surface
Contains only:
- /health
- /flights
"""

import logging
from typing import Any, Callable, Dict, Optional

from fastapi import APIRouter, Depends, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from itinerary_planner.core.exceptions import (
    ConfigurationError,
    NoFeasibleItinerary,
    NotificationFailure
)
from itinerary_planner.models.flight import PlannedItinerary
from itinerary_planner.models.request import FlightSearchQuery, FlightType
from itinerary_planner.services.notifier import (
    EMAIL_SUBJECT,
    EmailNotifier,
    format_itinerary_email,
    get_email_notifier
)
from itinerary_planner.services.planner import ItineraryPlanner, build_planner

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Itinerary Planner"])

GENERIC_ERROR_MESSAGE = "An error occurred while fetching flight data."


def get_planner_factory() -> Callable[[FlightType], ItineraryPlanner]:
    """Planner construction is deferred so configuration errors surface inside the request"""
    return build_planner


def _failed(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"status": "FAILED", "message": message})


def _send_itinerary_email(notifier: EmailNotifier, recipient: str, plan: PlannedItinerary) -> bool:
    """Best-effort delivery; failures are logged, never raised"""
    try:
        content = format_itinerary_email(plan.best_sequence, plan.best_itinerary)
        notifier.send(recipient, EMAIL_SUBJECT, content)
        return True
    except NotificationFailure as e:
        logger.warning(f"Itinerary email not sent: {str(e)}")
    except Exception:
        logger.exception(f"Unexpected error while emailing itinerary to {recipient}")
    return False


@router.get("/health", summary="Service health check")
async def health() -> Dict[str, str]:
    return {"status": "UP"}


@router.get("/flights", summary="Find the fastest around-the-world itinerary")
async def search_flights(
    start_origin: Optional[str] = None,
    departure_date: Optional[str] = None,
    departure_time: Optional[str] = None,
    flight_type: Optional[str] = None,
    email: Optional[str] = None,
    planner_factory: Callable[[FlightType], ItineraryPlanner] = Depends(get_planner_factory),
    notifier: EmailNotifier = Depends(get_email_notifier),
) -> Any:
    """
    Evaluate every candidate sequence from start_origin and return the one
    with the lowest total travel time.

    departure_date (YYYY-MM-DD) and departure_time (HH:MM) form one UTC instant.
    """
    try:
        query = FlightSearchQuery.from_params(
            start_origin=start_origin,
            departure_date=departure_date,
            departure_time=departure_time,
            flight_type=flight_type,
            email=email,
        )
        start_time = query.departure_instant()

        logger.info(
            "[Search] %s from %s (%s)",
            query.start_origin,
            start_time.isoformat(),
            query.flight_type.value,
        )

        planner = planner_factory(query.flight_type)
        plan = await run_in_threadpool(planner.select_best, query.start_origin, start_time)

    except NoFeasibleItinerary as e:
        logger.info("No feasible itinerary from %s: %s", start_origin, str(e))
        return _failed(status.HTTP_400_BAD_REQUEST, str(e))

    except ConfigurationError as e:
        logger.error("Invalid search request: %s", str(e))
        return _failed(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))

    except Exception:
        logger.exception("Itinerary search failed")
        return _failed(status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_ERROR_MESSAGE)

    if query.email:
        await run_in_threadpool(_send_itinerary_email, notifier, query.email, plan)

    return {
        "status": "SUCCESS",
        "data": plan.model_dump(mode="json"),
    }
