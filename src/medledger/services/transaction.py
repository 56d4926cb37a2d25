"""
Operation transactions
Journal every write of one ledger operation so it can be undone
"""

from typing import Any, Callable, Dict, Hashable, List, Optional

from medledger.services.sequence import SequenceGenerator


_MISSING = object()


class Transaction:
    """
    Undo journal for a single ledger operation

    Registries write through put() and draw order markers through
    tick(). rollback() restores every touched table entry and rewinds
    the sequence counter, leaving the state as it was before the
    operation started.
    """

    def __init__(self, sequence: SequenceGenerator) -> None:
        self._sequence = sequence
        self._start_sequence = sequence.current
        self._undo: List[Callable[[], None]] = []
        self.sequence_number: Optional[int] = None
        self.details: Dict[str, Any] = {}

    def tick(self) -> int:
        """Draw the operation's order marker"""
        if self.sequence_number is not None:
            raise RuntimeError("An operation records at most one sequence number")
        self.sequence_number = self._sequence.tick()
        return self.sequence_number

    def put(self, table: Dict[Hashable, Any], key: Hashable, value: Any) -> None:
        """Write table[key] = value, remembering the previous value"""
        previous = table.get(key, _MISSING)

        def undo() -> None:
            if previous is _MISSING:
                table.pop(key, None)
            else:
                table[key] = previous

        self._undo.append(undo)
        table[key] = value

    def on_rollback(self, callback: Callable[[], None]) -> None:
        """Register an extra undo step"""
        self._undo.append(callback)

    def record(self, **details: Any) -> None:
        """Attach operation details for the audit trail"""
        self.details.update(details)

    def rollback(self) -> None:
        """Undo all writes in reverse order and rewind the counter"""
        for undo in reversed(self._undo):
            undo()
        self._undo.clear()
        self._sequence.reset(self._start_sequence)
        self.sequence_number = None
