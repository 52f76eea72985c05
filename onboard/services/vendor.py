"""Vendor service — registration, admin CRUD and the agent edit-request flow.

Agents may edit a vendor they own only after an admin approved their edit
request; the flags are reset once the edit is saved:

  request_edit  -> edit_requested=True,  edit_approved=False
  approve_edit  -> edit_approved=True
  reject_edit   -> edit_requested=False, edit_approved=False
  agent_update  -> changes applied, both flags reset

Queries go through the repositories; the service only receives the session
to hand it on. Nothing here depends on FastAPI.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from onboard.core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from onboard.core.identity import Actor
from onboard.core.pagination import PaginationParams
from onboard.domain.vendor import FollowUpHistory, Vendor
from onboard.repositories.vendor import FollowUpHistoryRepository, VendorRepository
from onboard.schemas.vendor import VendorAgentUpdate, VendorCreate, VendorUpdate
from onboard.services.notification import StatusNotifier, notify_follow_up_change
from onboard.services.visit_status import INITIAL_STATUS

logger = logging.getLogger(__name__)


class VendorService:
    def __init__(self, session: AsyncSession, client_id: str, notifier: StatusNotifier | None = None):
        self._repo = VendorRepository(session, client_id)
        self._history = FollowUpHistoryRepository(session, client_id)
        self._notifier = notifier

    async def list_vendors(
        self,
        pagination: PaginationParams,
        status: str | None = None,
        visit_status: str | None = None,
        payment_category: str | None = None,
    ):
        filters = {
            "status": status,
            "visit_status": visit_status,
            "payment_category": payment_category,
        }
        items, total = await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            filters=filters,
        )
        return items, total

    async def list_agent_vendors(
        self, actor: Actor, pagination: PaginationParams, visit_status: str | None = None
    ):
        return await self._repo.list_for_agent(
            actor.id,
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            filters={"visit_status": visit_status},
        )

    async def get_vendor(self, vendor_id: str) -> Vendor:
        vendor = await self._repo.get_by_id(vendor_id)
        if not vendor:
            raise NotFoundError("Vendor", vendor_id)
        return vendor

    async def get_vendor_for(self, vendor_id: str, actor: Actor) -> Vendor:
        """Admins see every vendor, field users only their own."""
        vendor = await self.get_vendor(vendor_id)
        if not actor.is_admin and not vendor.is_owned_by(actor.id):
            raise ForbiddenError("You can only view your own vendors")
        return vendor

    async def get_history(self, vendor_id: str) -> list[FollowUpHistory]:
        return await self._history.list_for_vendor(vendor_id)

    async def create_vendor(self, data: VendorCreate, actor: Actor) -> Vendor:
        vendor = await self._repo.create(
            **data.model_dump(exclude_none=True),
            created_by_id=actor.id,
            created_by_name=actor.display_name,
            created_by_role=actor.role.value,
            visit_status=INITIAL_STATUS.value,
        )
        logger.info("Vendor %s registered by %s (%s)", vendor.id, actor.id, actor.role.value)
        return vendor

    async def update_vendor(self, vendor_id: str, data: VendorUpdate, actor: Actor) -> Vendor:
        vendor = await self.get_vendor(vendor_id)
        old_follow_up = vendor.follow_up_date

        changes = data.model_dump(exclude_none=True, exclude_unset=True)
        # A new assignee without a name must not inherit the previous one's
        if "assigned_agent_id" in changes and "assigned_agent_name" not in changes:
            changes["assigned_agent_name"] = None
        updated = await self._repo.update(vendor_id, **changes)

        if data.follow_up_date is not None:
            await notify_follow_up_change(
                self._notifier, vendor_id, actor, old_follow_up, data.follow_up_date
            )
        return updated  # type: ignore[return-value]

    async def delete_vendor(self, vendor_id: str) -> None:
        deleted = await self._repo.soft_delete(vendor_id)
        if not deleted:
            raise NotFoundError("Vendor", vendor_id)
        logger.info("Vendor %s deleted", vendor_id)

    # ------------------------------------------------------------------
    # Edit requests
    # ------------------------------------------------------------------

    async def list_edit_requests(self) -> list[Vendor]:
        return await self._repo.pending_edit_requests()

    async def request_edit(self, vendor_id: str, actor: Actor, remark: str = "") -> Vendor:
        vendor = await self.get_vendor(vendor_id)
        if not vendor.is_owned_by(actor.id):
            raise ForbiddenError("You can only request edits for your own vendors")
        if vendor.edit_requested and not vendor.edit_approved:
            raise ConflictError("An edit request for this vendor is already pending")

        vendor.edit_requested = True
        vendor.edit_approved = False
        vendor.edit_request_date = datetime.now(timezone.utc)
        vendor.edit_approval_date = None
        vendor.edit_remark = remark
        logger.info("Edit requested for vendor %s by %s", vendor.id, actor.id)
        return await self._repo.save(vendor)

    async def approve_edit(self, vendor_id: str) -> Vendor:
        vendor = await self.get_vendor(vendor_id)
        if not vendor.edit_requested:
            raise ValidationError("No edit request for this vendor", field="editRequested")
        vendor.edit_approved = True
        vendor.edit_approval_date = datetime.now(timezone.utc)
        logger.info("Edit request for vendor %s approved", vendor.id)
        return await self._repo.save(vendor)

    async def reject_edit(self, vendor_id: str) -> Vendor:
        vendor = await self.get_vendor(vendor_id)
        if not vendor.edit_requested:
            raise ValidationError("No edit request for this vendor", field="editRequested")
        vendor.edit_requested = False
        vendor.edit_approved = False
        vendor.edit_approval_date = None
        logger.info("Edit request for vendor %s rejected", vendor.id)
        return await self._repo.save(vendor)

    async def agent_update(self, vendor_id: str, actor: Actor, data: VendorAgentUpdate) -> Vendor:
        vendor = await self.get_vendor(vendor_id)
        if not vendor.is_owned_by(actor.id):
            raise ForbiddenError("You can only edit your own vendors")
        if not (vendor.edit_requested and vendor.edit_approved):
            raise ForbiddenError("Edit permission not granted. Please request edit access first")

        old_follow_up = vendor.follow_up_date
        for field, value in data.model_dump(exclude_none=True, exclude_unset=True).items():
            setattr(vendor, field, value)
        vendor.edit_requested = False
        vendor.edit_approved = False
        vendor.edit_remark = ""
        logger.info("Vendor %s edited by %s", vendor.id, actor.id)
        vendor = await self._repo.save(vendor)

        if data.follow_up_date is not None:
            await notify_follow_up_change(
                self._notifier, vendor.id, actor, old_follow_up, data.follow_up_date
            )
        return vendor
