from __future__ import annotations

from flask import Blueprint, request

from hopebridge.blueprints import json_ok, request_payload, services
from hopebridge.errors import ValidationError
from hopebridge.models import Wish
from hopebridge.models.wish import WISH_STATUSES
from hopebridge.store import current_store

bp = Blueprint("wishes", __name__, url_prefix="/wishes")


@bp.get("")
def list_wishes():
    filters = {}
    child_id = (request.args.get("childId") or request.args.get("child_id") or "").strip()
    if child_id:
        filters["child_id"] = child_id
    status = (request.args.get("status") or "").strip()
    if status:
        if status not in WISH_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(WISH_STATUSES)}", extra={"field": "status"})
        filters["status"] = status

    wishes = current_store().find(Wish, order_by=(Wish.created_at, Wish.id), **filters)
    return json_ok({"wishes": [w.to_dict() for w in wishes]})


@bp.post("/<wish_id>/fulfill")
def fulfill_wish(wish_id: str):
    data = request_payload()
    donor_id = str(data.get("donorId") or data.get("donor_id") or "").strip()
    if not donor_id:
        raise ValidationError("donorId required", extra={"field": "donorId"})
    donor_name = str(data.get("donorName") or data.get("donor_name") or "").strip() or None

    svc = services()
    svc.donors.fulfill_wish(wish_id, donor_id, donor_name)
    wish = svc.store.require(Wish, wish_id)
    return json_ok({"wish": wish.to_dict()})
