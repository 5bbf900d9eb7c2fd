from __future__ import annotations

from flask import Blueprint, current_app, request

from hopebridge.blueprints import json_ok, request_payload, services
from hopebridge.errors import ValidationError
from hopebridge.services.payloads import SponsorshipData

bp = Blueprint("sponsorships", __name__, url_prefix="/sponsorships")


@bp.post("")
def create_sponsorship():
    data = SponsorshipData.from_payload(
        request_payload(),
        default_currency=str(current_app.config.get("DEFAULT_CURRENCY") or "XAF"),
    )
    sponsorship = services().donors.create_sponsorship(data)
    return json_ok({"sponsorship": sponsorship.to_dict()}, 201)


@bp.get("")
def list_sponsorships():
    donor_id = (request.args.get("donorId") or request.args.get("donor_id") or "").strip()
    if not donor_id:
        raise ValidationError("donorId required", extra={"field": "donorId"})
    rows = services().donors.get_sponsorships_by_donor(donor_id)
    return json_ok({"sponsorships": [s.to_dict() for s in rows]})
