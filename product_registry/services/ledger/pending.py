# services/ledger/pending.py
import uuid
from concurrent.futures import Future, TimeoutError as FutureTimeout
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from product_registry.core.exceptions import ConfirmationTimeout, RegistryError
from product_registry.models.enums import HandleState, TransitionType


class PendingTransition:
    """
    Handle for a submitted transition

    Resolves once the backend has committed. Giving up on result() leaves the
    transition running.
    """

    def __init__(self, transition: TransitionType, future: Future,
                 product_id: Optional[int] = None):
        self.handle_id = uuid.uuid4().hex
        self.transition = transition
        self.product_id = product_id
        self.submitted_at = datetime.now(timezone.utc)
        self._future = future

    def done(self) -> bool:
        return self._future.done()

    @property
    def state(self) -> HandleState:
        if not self._future.done():
            return HandleState.PENDING
        return HandleState.FAILED if self._future.exception() else HandleState.CONFIRMED

    def result(self, timeout: Optional[float] = None) -> Any:
        """
        Wait for confirmation

        Returns:
            new product id for create, new ProductStatus for verify/finalize

        Raises:
            ConfirmationTimeout: if timeout elapses first
            RegistryError: whatever the transition failed with
        """
        try:
            return self._future.result(timeout=timeout)
        except FutureTimeout:
            raise ConfirmationTimeout(
                f"{self.transition.value} still pending after {timeout}s (handle {self.handle_id})"
            )

    def exception(self) -> Optional[BaseException]:
        if not self._future.done():
            return None
        return self._future.exception()

    def to_dict(self) -> Dict[str, Any]:
        state = self.state
        data = {
            'handle_id': self.handle_id,
            'transition': self.transition.value,
            'product_id': self.product_id,
            'state': state.value,
            'submitted_at': self.submitted_at.isoformat()
        }

        if state is HandleState.CONFIRMED:
            value = self._future.result()
            if self.transition is TransitionType.CREATE:
                data['product_id'] = value
            else:
                data['status'] = value.label
        elif state is HandleState.FAILED:
            error = self._future.exception()
            data['error'] = error.kind if isinstance(error, RegistryError) else 'internal_error'
            data['message'] = str(error)

        return data
