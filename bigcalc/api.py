# api.py
"""
HTTP evaluation service for bigcalc.

Endpoints:
- POST /evaluate        evaluate one expression
- POST /evaluate/batch  evaluate many independent expressions, results in input order
- GET  /health          liveness check

Syntax errors are part of a successful response (success=false plus the
message); only malformed requests and oversized batches produce HTTP errors.
Values are returned as decimal strings so JSON clients never round them.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, Field, ValidationError

from .config import Settings, configure_logging, load_settings
from .parser import evaluate, render_tree
from .scanner import decimal_text

logger = logging.getLogger(__name__)


# ----- Pydantic Models -----

class ExpressionRequest(BaseModel):
    """A single expression to evaluate."""
    expression: str = Field(..., description="Arithmetic expression, e.g. '(1 + 2) * -3'")
    include_tree: bool = Field(False, description="Include the rendered parse tree")


class BatchRequest(BaseModel):
    """Independent expressions evaluated in one request."""
    expressions: List[str] = Field(..., min_length=1)
    include_tree: bool = False


class EvaluationResponse(BaseModel):
    """Outcome of evaluating one expression."""
    expression: str
    success: bool
    value: Optional[str] = None
    error: Optional[str] = None
    tree: Optional[str] = None


class BatchResponse(BaseModel):
    """Outcomes in the same order as the request's expressions."""
    results: List[EvaluationResponse]


class ErrorResponse(BaseModel):
    """Model for error responses."""
    detail: str


# ----- Service Layer -----

def evaluate_expression(expression: str, include_tree: bool = False) -> EvaluationResponse:
    """Evaluate one expression and wrap the outcome in a response model."""
    result = evaluate(expression)
    if not result.success:
        return EvaluationResponse(expression=expression, success=False, error=result.error)
    return EvaluationResponse(
        expression=expression,
        success=True,
        value=decimal_text(result.value),
        tree=render_tree(result.tree) if include_tree else None,
    )


async def evaluate_batch(expressions: List[str], include_tree: bool = False) -> List[EvaluationResponse]:
    """
    Evaluate expressions concurrently in worker threads.

    Each expression is an independent unit of work; gather keeps input order.
    """
    return await asyncio.gather(
        *(asyncio.to_thread(evaluate_expression, e, include_tree) for e in expressions)
    )


# ----- Application Lifecycle -----

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle.

    Settings load here, not at import; a bad BIGCALC_* variable is logged
    and stops the startup.
    """
    try:
        settings = get_settings()
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        raise
    configure_logging(settings.log_level)
    logger.info("bigcalc API starting up")
    yield
    logger.info("bigcalc API shutting down")


app = FastAPI(
    title="bigcalc API",
    description="Evaluate + - * ( ) expressions over arbitrary-precision integers",
    version="1.0.0",
    lifespan=lifespan,
)


# ----- Dependency Injection -----

@lru_cache
def get_settings() -> Settings:
    """
    Dependency for runtime settings, loaded from the environment on first use.
    For testing, this can be overridden.
    """
    return load_settings()


# ----- API Routes -----

@app.get("/health", summary="Liveness check")
async def health():
    return {"status": "ok"}


@app.post(
    "/evaluate",
    response_model=EvaluationResponse,
    summary="Evaluate an expression",
)
async def evaluate_one(request: ExpressionRequest):
    """
    Evaluate a single expression.

    A syntax error is reported in the body with success=false, not as an HTTP error.
    """
    logger.info(f"Evaluating expression of {len(request.expression)} characters")
    response = evaluate_expression(request.expression, request.include_tree)
    if not response.success:
        logger.info(f"Expression rejected: {response.error}")
    return response


@app.post(
    "/evaluate/batch",
    response_model=BatchResponse,
    responses={413: {"model": ErrorResponse}},
    summary="Evaluate several expressions",
)
async def evaluate_many(
    request: BatchRequest,
    settings: Settings = Depends(get_settings),
):
    """
    Evaluate independent expressions; results keep the request's order.
    """
    count = len(request.expressions)
    if count > settings.max_batch_size:
        logger.error(f"Batch of {count} expressions exceeds limit {settings.max_batch_size}")
        raise HTTPException(
            status_code=413,
            detail=f"Batch of {count} expressions exceeds the limit of {settings.max_batch_size}",
        )
    logger.info(f"Evaluating batch of {count} expressions")
    results = await evaluate_batch(request.expressions, request.include_tree)
    return BatchResponse(results=results)


# ----- Main Entry Point -----

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("bigcalc.api:app", host="0.0.0.0", port=8000, reload=True)
