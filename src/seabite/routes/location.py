import logging
from dataclasses import asdict

from flask import Blueprint, request

from seabite.routes.schemas import ReverseLookupQuerySchema, SearchLookupQuerySchema
from seabite.routes.utils import get_container, load_or_400, success_response
from seabite.services.location_service import LocationLookup, LocationService, is_deliverable

logger = logging.getLogger(__name__)

location_bp = Blueprint("location", __name__)

_reverse_schema = ReverseLookupQuerySchema()
_search_schema = SearchLookupQuerySchema()


def _lookup_payload(lookup: LocationLookup):
    return {
        "found": lookup.found,
        "deliverable": lookup.deliverable,
        "address": asdict(lookup.address) if lookup.address else None,
    }


@location_bp.route("/reverse", methods=["GET"])
def reverse_lookup():
    """Address and deliverability of a map position (?lat=&lon=)."""
    query = load_or_400(_reverse_schema, request.args)
    lookup = get_container().get(LocationService).locate(query["lat"], query["lon"])
    return success_response(_lookup_payload(lookup))


@location_bp.route("/search", methods=["GET"])
def search_lookup():
    query = load_or_400(_search_schema, request.args)
    lookup = get_container().get(LocationService).search(query["q"])
    return success_response(_lookup_payload(lookup))


@location_bp.route("/deliverable", methods=["GET"])
def check_state():
    """Plain allow-list check for a state name (?state=Telangana)."""
    state = request.args.get("state", "")
    return success_response({"state": state, "deliverable": is_deliverable(state)})
