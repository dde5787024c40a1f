"""
Analysis sessions.

A session owns the current assumption and expense bundles for one dashboard
and the analysis derived from them. Every edit builds new bundles, runs the
model once on the complete inputs, and only then swaps bundles and result
together, so a reader never sees a result that belongs to other inputs.
"""

import logging
import threading
import uuid
from typing import Dict, Optional, Tuple

from propvest.calculations.analysis import (
    AnalysisResult,
    FinancingAssumptions,
    OperatingExpenses,
    compute_analysis,
)

logger = logging.getLogger(__name__)


class AnalysisSession:
    """Current inputs and their analysis for a single dashboard."""

    def __init__(
        self,
        assumptions: Optional[FinancingAssumptions] = None,
        expenses: Optional[OperatingExpenses] = None,
        session_id: Optional[str] = None,
    ):
        self.id = session_id or str(uuid.uuid4())
        self._defaults = (
            assumptions or FinancingAssumptions(),
            expenses or OperatingExpenses(),
        )
        self._state = self._evaluate(*self._defaults)

    @staticmethod
    def _evaluate(
        assumptions: FinancingAssumptions, expenses: OperatingExpenses
    ) -> Tuple[FinancingAssumptions, OperatingExpenses, AnalysisResult]:
        return assumptions, expenses, compute_analysis(assumptions, expenses)

    @property
    def assumptions(self) -> FinancingAssumptions:
        return self._state[0]

    @property
    def expenses(self) -> OperatingExpenses:
        return self._state[1]

    @property
    def analysis(self) -> AnalysisResult:
        return self._state[2]

    def snapshot(self) -> Tuple[FinancingAssumptions, OperatingExpenses, AnalysisResult]:
        """Inputs and result as one consistent triple."""
        return self._state

    def replace(
        self,
        assumptions: Optional[FinancingAssumptions] = None,
        expenses: Optional[OperatingExpenses] = None,
    ) -> AnalysisResult:
        """
        Replace one or both bundles and recompute.

        Raises:
            AnalysisError: If the new inputs are invalid; the session is unchanged
        """
        current_assumptions, current_expenses, _ = self._state
        self._state = self._evaluate(
            assumptions or current_assumptions,
            expenses or current_expenses,
        )
        logger.debug(f"Session {self.id} recomputed: cash_flow={self.analysis.cash_flow:.2f}")
        return self.analysis

    def update_assumptions(self, **changes) -> AnalysisResult:
        """Change individual financing fields and recompute."""
        return self.replace(assumptions=self.assumptions.with_changes(**changes))

    def update_expenses(self, **changes) -> AnalysisResult:
        """Change individual expense fields and recompute."""
        return self.replace(expenses=self.expenses.with_changes(**changes))

    def reset(self) -> AnalysisResult:
        """Restore the bundles the session was created with."""
        return self.replace(*self._defaults)


class SessionStore:
    """In-memory registry of sessions, one lock serializing all edits."""

    def __init__(self):
        self._sessions: Dict[str, AnalysisSession] = {}
        self._lock = threading.Lock()

    def create(
        self,
        assumptions: Optional[FinancingAssumptions] = None,
        expenses: Optional[OperatingExpenses] = None,
    ) -> AnalysisSession:
        session = AnalysisSession(assumptions, expenses)
        with self._lock:
            self._sessions[session.id] = session
        logger.info(f"Created analysis session {session.id}")
        return session

    def get(self, session_id: str) -> AnalysisSession:
        """
        Look up a session.

        Raises:
            KeyError: If no session has this id
        """
        with self._lock:
            return self._sessions[session_id]

    def delete(self, session_id: str) -> bool:
        with self._lock:
            removed = self._sessions.pop(session_id, None) is not None
        if removed:
            logger.info(f"Deleted analysis session {session_id}")
        return removed

    def update_assumptions(self, session_id: str, **changes) -> AnalysisSession:
        with self._lock:
            session = self._sessions[session_id]
            session.update_assumptions(**changes)
        return session

    def update_expenses(self, session_id: str, **changes) -> AnalysisSession:
        with self._lock:
            session = self._sessions[session_id]
            session.update_expenses(**changes)
        return session

    def reset(self, session_id: str) -> AnalysisSession:
        with self._lock:
            session = self._sessions[session_id]
            session.reset()
        return session

    def __len__(self) -> int:
        return len(self._sessions)
