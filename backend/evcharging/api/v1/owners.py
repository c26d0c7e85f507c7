"""EV owner endpoints."""

from __future__ import annotations

from flask import Blueprint, request

from evcharging.api.deps import (
    envelope,
    parse_pagination,
    require_auth,
    require_roles,
    service_context,
    timing,
)
from evcharging.core.extensions import get_session_store
from evcharging.schemas import (
    MetaSchema,
    OwnerFilterSchema,
    OwnerRegisterSchema,
    OwnerSchema,
    OwnerUpdateSchema,
)
from evcharging.services._shared.policies.common import BACK_OFFICE
from evcharging.services.owners.dto import (
    OwnerListIn,
    OwnerRegisterIn,
    OwnerUpdateIn,
    VehicleData,
)
from evcharging.services.owners.service import OwnerService

bp = Blueprint("owners", __name__, url_prefix="/owners")

owner_schema = OwnerSchema()
owner_list_schema = OwnerSchema(many=True)
register_schema = OwnerRegisterSchema()
update_schema = OwnerUpdateSchema()
filter_schema = OwnerFilterSchema()
meta_schema = MetaSchema()


def _service() -> OwnerService:
    return OwnerService(ctx=service_context(), session_store=get_session_store())


def _vehicles(raw: list[dict] | None) -> tuple[VehicleData, ...] | None:
    if raw is None:
        return None
    return tuple(VehicleData(**v) for v in raw)


@bp.post("")
@timing
def register_owner():
    """Public self-registration."""

    data = register_schema.load(request.get_json(silent=True) or {})
    owner = OwnerService().register(
        OwnerRegisterIn(
            nic=data["nic"],
            first_name=data["first_name"],
            last_name=data["last_name"],
            email=data["email"],
            phone_number=data["phone_number"],
            password=data["password"],
            vehicles=_vehicles(data["vehicles"]) or (),
        )
    )
    return envelope("EV Owner created successfully", owner_schema.dump(owner))


@bp.get("")
@require_roles(BACK_OFFICE)
@timing
def list_owners():
    """Return paginated owners (back-office)."""

    filters = filter_schema.load(request.args)
    pagination = parse_pagination()
    result = _service().list_owners(
        OwnerListIn(
            page=pagination.page,
            limit=pagination.limit,
            sort=pagination.sort,
            is_active=filters["is_active"],
        )
    )
    return envelope(
        "EV Owners retrieved successfully",
        owner_list_schema.dump(result.items),
        meta=meta_schema.dump(result.meta),
    )


@bp.get("/deactivated")
@require_roles(BACK_OFFICE)
@timing
def list_deactivated():
    """Return inactive owners awaiting reactivation (back-office)."""

    owners = _service().list_deactivated()
    return envelope("Deactivated EV Owners retrieved successfully", owner_list_schema.dump(owners))


@bp.get("/nic/<string:nic>")
@require_auth
@timing
def get_owner_by_nic(nic: str):
    owner = _service().get_by_nic(nic)
    return envelope("EV Owner retrieved successfully", owner_schema.dump(owner))


@bp.get("/<string:owner_id>")
@require_auth
@timing
def get_owner(owner_id: str):
    owner = _service().get(owner_id)
    return envelope("EV Owner retrieved successfully", owner_schema.dump(owner))


@bp.put("/<string:owner_id>")
@require_auth
@timing
def update_owner(owner_id: str):
    """Update profile fields; the NIC cannot be changed."""

    data = update_schema.load(request.get_json(silent=True) or {})
    owner = _service().update(
        OwnerUpdateIn(
            owner_id=owner_id,
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            email=data.get("email"),
            phone_number=data.get("phone_number"),
            vehicles=_vehicles(data.get("vehicles")),
        )
    )
    return envelope("EV Owner updated successfully", owner_schema.dump(owner))


@bp.patch("/<string:owner_id>/deactivate")
@require_auth
@timing
def deactivate_owner(owner_id: str):
    _service().deactivate(owner_id)
    return envelope("EV Owner deactivated successfully", True)


@bp.patch("/<string:owner_id>/reactivate")
@require_roles(BACK_OFFICE)
@timing
def reactivate_owner(owner_id: str):
    _service().reactivate(owner_id)
    return envelope("EV Owner reactivated successfully", True)


@bp.delete("/<string:owner_id>")
@require_auth
@timing
def delete_owner(owner_id: str):
    _service().delete(owner_id)
    return envelope("EV Owner deleted successfully", True)
