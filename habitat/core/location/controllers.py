"""Location HTTP controllers.

These routes keep the ``success`` envelope the mobile client already reads.
"""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from habitat.core.location.catalogue import LANDMARKS
from habitat.core.location.services import keys_by_priority, landmark, properties_near
from habitat.core.properties.models import Property

location_api_bp = Blueprint("location_api", __name__)

DEFAULT_NEAR_LIMIT = 8


def _limit_arg(default: int) -> int:
    try:
        limit = int(request.args.get("limit", default))
    except (TypeError, ValueError):
        return default
    return limit if limit > 0 else default


@location_api_bp.get("/locations")
def list_locations():
    return jsonify({"success": True, "locations": {key: place.to_dict() for key, place in LANDMARKS.items()}})


@location_api_bp.get("/keys")
def list_keys():
    return jsonify({"success": True, "keys": keys_by_priority()})


@location_api_bp.get("/near/<key>")
def near(key: str):
    place = landmark(key)
    if place is None:
        return jsonify({"success": False, "error": "Location not found"})

    limit = _limit_arg(DEFAULT_NEAR_LIMIT)
    active = Property.query.filter_by(is_active=True).order_by(Property.id).all()
    nearby = properties_near(active, key)[:limit]
    return jsonify(
        {
            "success": True,
            "properties": [p.to_dict() for p in nearby],
            "location": place.to_dict(),
            "count": len(nearby),
        }
    )
