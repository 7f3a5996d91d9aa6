# receipt_processor/store.py
import threading
from typing import Callable, Dict, Optional, Tuple

from .ids import generate_id
from .schemas import Receipt, ScoredReceipt
from .services.points import score


class ReceiptStore:
    """
    In-memory id -> ScoredReceipt map. One lock serialises every operation,
    reads included; records are never updated or removed.
    """

    def __init__(
        self,
        scorer: Callable[[Receipt], int] = score,
        id_factory: Callable[[], str] = generate_id,
    ):
        self._records: Dict[str, ScoredReceipt] = {}
        self._lock = threading.Lock()
        self._scorer = scorer
        self._id_factory = id_factory

    def put(self, receipt_id: str, scored: ScoredReceipt) -> None:
        # an existing id is overwritten; 128 random bits make that negligible
        with self._lock:
            self._records[receipt_id] = scored

    def get(self, receipt_id: str) -> Optional[ScoredReceipt]:
        with self._lock:
            return self._records.get(receipt_id)

    def process(self, receipt: Receipt) -> Tuple[str, ScoredReceipt]:
        """Score, allocate an id and store, all under one lock hold."""
        with self._lock:
            scored = ScoredReceipt.from_receipt(receipt, self._scorer(receipt))
            receipt_id = self._id_factory()
            self._records[receipt_id] = scored
            return receipt_id, scored

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, receipt_id: object) -> bool:
        with self._lock:
            return receipt_id in self._records
