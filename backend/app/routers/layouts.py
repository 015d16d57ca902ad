from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
from typing import List, Dict, Optional, Any
import logging
import time

# Absolute package imports keep the package context when uvicorn loads this
# module via the package path.
from backend.app.layouts.engine import ALGORITHM_PARAMETERS, Algorithm, layout, make_request
from backend.app.layouts.errors import LayoutError

router = APIRouter()
logger = logging.getLogger(__name__)

# Request field name for each engine parameter
_API_FIELDS = {
    "iterations": "iterations",
    "gravity": "gravity",
    "scaling_ratio": "scalingRatio",
    "seed": "seed",
    "root": "root",
}


class LayoutApiRequest(BaseModel):
    graph: str = ""
    iterations: Optional[int] = None
    gravity: Optional[float] = None
    scalingRatio: Optional[float] = None
    seed: Optional[int] = None
    outputFormat: Optional[str] = None
    timeoutSeconds: Optional[float] = None
    root: Optional[int] = None


class LayoutApiResponse(BaseModel):
    graph: str
    algorithm: str
    iterations: int
    generationTime: float
    cancelled: bool = False
    warnings: List[str] = []


class AlgorithmInfo(BaseModel):
    name: str
    parameters: List[str]


@router.get("/", response_model=List[AlgorithmInfo])
def list_algorithms():
    """Available algorithms and the parameters each one reads."""
    return [
        AlgorithmInfo(name=a.value, parameters=[_API_FIELDS[p] for p in ALGORITHM_PARAMETERS[a]])
        for a in Algorithm
    ]


@router.post("/{algorithm}", response_model=LayoutApiResponse)
def run_layout(algorithm: str, request: LayoutApiRequest):
    """Lay out the posted graph with the selected algorithm."""
    try:
        selected = Algorithm(algorithm)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown layout algorithm: {algorithm}")

    fields: Dict[str, Any] = {
        "algorithm": selected,
        "graph": request.graph,
        "iterations": request.iterations,
        "gravity": request.gravity,
        "scaling_ratio": request.scalingRatio,
        "seed": request.seed,
        "output_format": request.outputFormat,
        "timeout_seconds": request.timeoutSeconds,
        "root": request.root,
    }
    # Omitted fields fall back to the engine defaults; an explicit null seed or
    # timeout means the same thing as omitting it.
    fields = {k: v for k, v in fields.items() if v is not None}

    try:
        t0 = time.time()
        logger.info("[layout] request received: algorithm=%s, graph=%d chars", selected.value, len(request.graph))
        result = layout(make_request(**fields))
        logger.info("[layout] success: algorithm=%s, time=%.2fs", selected.value, time.time() - t0)
        return LayoutApiResponse(
            graph=result.graph,
            algorithm=result.algorithm,
            iterations=result.iterations,
            generationTime=result.generation_time,
            cancelled=result.cancelled,
            warnings=result.warnings,
        )
    except LayoutError as e:
        logger.info("[layout] rejected: %s", str(e))
        raise HTTPException(status_code=400, detail=e.to_dict())
    except Exception as e:
        logger.exception("[layout] error: %s", str(e))
        raise HTTPException(status_code=500, detail=f"Layout error: {str(e)}")
