"""
Simulation set routes.

Thin HTTP adapter over the simulation store. Handlers are plain functions so
FastAPI runs the blocking session work in its threadpool. Persistence errors
never escape as unhandled faults: they are logged and mapped to a generic 500
response.

Routes:
    POST /api/simulations/           - Create a simulation set, returns caseId and resultsUrl
    GET  /api/simulations/{case_id}  - Get the full nested simulation set JSON
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.orm import Session

from whatif import config
from whatif.db import get_db
from whatif.schemas import SimulationSetCreate
from whatif.services.simulation_store import create_simulation_set, get_simulation_set
from whatif.logging_config import get_logger

# Module logger for simulation operations
logger = get_logger(__name__)

router = APIRouter(prefix="/api/simulations")


@router.post("/")
def create_simulation(
    data: SimulationSetCreate,
    db: Session = Depends(get_db)
):
    """
    Save a new simulation set with all nested scenarios.

    Args:
        data: SimulationSetCreate payload (validated before any write)

    Returns:
        201 JSON response with the generated caseId and the results URL
    """
    try:
        case_id = create_simulation_set(db, data)
    except Exception as e:
        logger.error(f"Failed to save simulation set '{data.name}': {e}", exc_info=True)
        return PlainTextResponse(
            "An error occurred while saving the simulation set.",
            status_code=500
        )

    return JSONResponse({
        "caseId": case_id,
        "resultsUrl": config.results_url(case_id)
    }, status_code=201)


@router.get("/{case_id}")
def read_simulation(
    case_id: str,
    db: Session = Depends(get_db)
):
    """
    Load a simulation set by its case id.

    Returns:
        JSON document with scenarios, assignments and stress metrics,
        404 if the set does not exist
    """
    try:
        document = get_simulation_set(db, case_id)
    except Exception as e:
        logger.error(f"Failed to retrieve simulation set {case_id}: {e}", exc_info=True)
        return PlainTextResponse(
            "An error occurred while retrieving the simulation set.",
            status_code=500
        )

    if document is None:
        logger.warning(f"Simulation set {case_id} not found")
        return PlainTextResponse("Simulation set not found.", status_code=404)

    logger.info(f"Simulation set loaded: {case_id} ({len(document['scenarios'])} scenario(s))")
    return JSONResponse(document)
