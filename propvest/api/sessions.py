"""
Analysis session API endpoints.

A session holds the dashboard's current inputs. Each PATCH changes one or
more fields and returns the freshly recomputed analysis together with the
inputs it was computed from.
"""

from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from propvest.api.calculations import AnalysisInput, AnalysisMetrics, ExpensesInput, FinancingInput
from propvest.calculations.analysis import AnalysisError
from propvest.session import AnalysisSession, SessionStore

router = APIRouter()


@lru_cache()
def get_session_store() -> SessionStore:
    """Process-wide session store."""
    return SessionStore()


class FinancingUpdate(BaseModel):
    """Partial update of financing assumptions."""

    purchase_price: Optional[float] = None
    down_payment_percent: Optional[float] = None
    interest_rate: Optional[float] = None
    loan_term_years: Optional[int] = None
    nightly_rate: Optional[float] = None
    occupancy_rate: Optional[float] = None


class ExpensesUpdate(BaseModel):
    """Partial update of operating expenses."""

    property_tax_yearly: Optional[float] = None
    insurance_yearly: Optional[float] = None
    hoa_monthly: Optional[float] = None
    utilities_monthly: Optional[float] = None
    maintenance_monthly: Optional[float] = None
    management_fee_percent: Optional[float] = None
    other_monthly: Optional[float] = None


class SessionResponse(BaseModel):
    """Session inputs and the analysis derived from them."""

    id: str
    assumptions: FinancingInput
    expenses: ExpensesInput
    analysis: AnalysisMetrics


def session_to_response(session: AnalysisSession) -> SessionResponse:
    """Convert a session to its response schema from one consistent snapshot."""
    assumptions, expenses, result = session.snapshot()
    return SessionResponse(
        id=session.id,
        assumptions=FinancingInput(**assumptions.to_dict()),
        expenses=ExpensesInput(**expenses.to_dict()),
        analysis=AnalysisMetrics.from_result(result),
    )


def _not_found(session_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Session {session_id} not found")


@router.post("/", response_model=SessionResponse, status_code=201)
async def create_session(
    inputs: Optional[AnalysisInput] = None,
    store: SessionStore = Depends(get_session_store),
):
    """Start a session, from defaults or the given inputs."""
    inputs = inputs or AnalysisInput()
    try:
        session = store.create(
            inputs.assumptions.to_assumptions(), inputs.expenses.to_expenses()
        )
    except AnalysisError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return session_to_response(session)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str, store: SessionStore = Depends(get_session_store)):
    """Get a session's inputs and current analysis."""
    try:
        return session_to_response(store.get(session_id))
    except KeyError:
        raise _not_found(session_id)


@router.patch("/{session_id}/assumptions", response_model=SessionResponse)
async def update_assumptions(
    session_id: str,
    changes: FinancingUpdate,
    store: SessionStore = Depends(get_session_store),
):
    """Change financing fields and recompute."""
    try:
        session = store.update_assumptions(
            session_id, **changes.model_dump(exclude_none=True)
        )
    except KeyError:
        raise _not_found(session_id)
    except AnalysisError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return session_to_response(session)


@router.patch("/{session_id}/expenses", response_model=SessionResponse)
async def update_expenses(
    session_id: str,
    changes: ExpensesUpdate,
    store: SessionStore = Depends(get_session_store),
):
    """Change expense fields and recompute."""
    try:
        session = store.update_expenses(
            session_id, **changes.model_dump(exclude_none=True)
        )
    except KeyError:
        raise _not_found(session_id)
    except AnalysisError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return session_to_response(session)


@router.post("/{session_id}/reset", response_model=SessionResponse)
async def reset_session(session_id: str, store: SessionStore = Depends(get_session_store)):
    """Restore the session's starting inputs."""
    try:
        return session_to_response(store.reset(session_id))
    except KeyError:
        raise _not_found(session_id)


@router.delete("/{session_id}")
async def delete_session(session_id: str, store: SessionStore = Depends(get_session_store)):
    """Discard a session."""
    if not store.delete(session_id):
        raise _not_found(session_id)
    return {"deleted": True}
