"""
Approval workflow for pending student registrations.

    pending --approve--> approved   (terminal)
    pending --reject---> rejected   (terminal, reason recorded)

Input is validated before the collaborator is contacted. Requests that are
already terminal are refused by the collaborator, not special-cased here.
After every successful decision the pending queue is reloaded so processed
requests drop out of it.
"""

from __future__ import annotations

from typing import Optional, Tuple

from labdesk.collaborators.abstract import RecordStore
from labdesk.config import get_settings
from labdesk.domain.models import DecisionAction, RegistrationRequest
from labdesk.errors import LabdeskError, TransportError, ValidationError
from labdesk.utils.logging import get_logger
from labdesk.workflows.tracking import RequestTracker

log = get_logger(__name__)


class ApprovalWorkflow:
    """
    Holds the pending-registration queue and applies decisions to it.

    With `version_check` enabled, each decision carries the version of the
    request as last loaded and the collaborator refuses it if another approver
    got there first. Without it, concurrent approvers resolve last-write-wins.
    """

    def __init__(self, store: RecordStore, version_check: Optional[bool] = None) -> None:
        self.store = store
        self.version_check = (
            get_settings().approval_version_check if version_check is None else version_check
        )
        self._pending: Tuple[RegistrationRequest, ...] = ()
        self._tracker = RequestTracker("pending")
        self.processing: Optional[int] = None
        self.last_error: Optional[str] = None

    @property
    def pending(self) -> Tuple[RegistrationRequest, ...]:
        return self._pending

    @property
    def loading(self) -> bool:
        return self._tracker.loading

    def get(self, request_id: int) -> Optional[RegistrationRequest]:
        for request in self._pending:
            if request.id == request_id:
                return request
        return None

    async def load_pending(self) -> Tuple[RegistrationRequest, ...]:
        async with self._tracker.track() as ticket:
            try:
                requests = await self.store.fetch_pending()
            except LabdeskError as exc:
                self.last_error = str(exc)
                raise
            except Exception as exc:
                log.exception("[PENDING FETCH FAILED]")
                self.last_error = f"Failed to load pending registrations: {exc}"
                raise TransportError(self.last_error) from exc
        if ticket.accept():
            self._pending = tuple(requests)
            self.last_error = None
            log.debug(f"[PENDING LOADED] {len(self._pending)} requests")
        return self._pending

    async def approve(self, request_id: int, approver_id: int) -> None:
        self._require_approver(approver_id)
        await self._decide(request_id, approver_id, DecisionAction.APPROVE)

    async def reject(self, request_id: int, approver_id: int, reason: str) -> None:
        self._require_approver(approver_id)
        if reason is None or not reason.strip():
            self.last_error = "Please provide a rejection reason"
            raise ValidationError("rejection reason is required")
        await self._decide(request_id, approver_id, DecisionAction.REJECT, reason)

    def _require_approver(self, approver_id: Optional[int]) -> None:
        if approver_id is None:
            self.last_error = "An approver is required"
            raise ValidationError("an approver is required")

    async def _decide(
        self,
        request_id: int,
        approver_id: int,
        action: DecisionAction,
        reason: Optional[str] = None,
    ) -> None:
        expected_version = None
        if self.version_check:
            known = self.get(request_id)
            if known is None:
                log.warning(
                    f"[VERSION UNKNOWN] registration #{request_id} is not in the loaded "
                    "queue; deciding without a version check",
                    extra={"request_id": request_id},
                )
            else:
                expected_version = known.version

        self.processing = request_id
        self.last_error = None
        try:
            await self.store.decide(
                request_id,
                approver_id,
                action,
                reason=reason,
                expected_version=expected_version,
            )
        except LabdeskError as exc:
            log.warning(
                f"[DECISION FAILED] {action.value} #{request_id}: {exc}",
                extra={"request_id": request_id, "error": type(exc).__name__},
            )
            self.last_error = f"Failed to {action.value} registration: {exc}"
            raise
        except Exception as exc:
            log.exception(f"[DECISION FAILED] {action.value} #{request_id}")
            self.last_error = f"Failed to {action.value} registration: {exc}"
            raise TransportError(self.last_error) from exc
        finally:
            self.processing = None

        log.info(
            f"[DECISION] registration #{request_id} {action.value}d by {approver_id}",
            extra={"request_id": request_id, "approver_id": approver_id},
        )
        await self.load_pending()


__all__ = ["ApprovalWorkflow"]
