import logging

from blood import api
from blood.models import parse_blood_group
from blood.results import ErrorKind
from . import services
from .serializers import donor_dict, donor_list


logger = logging.getLogger(__name__)


def _with_canonical_group(payload):
    data = dict(payload)
    if "blood_group" in data:
        data["blood_group"] = parse_blood_group(data["blood_group"]) or data["blood_group"]
    return data


@api.api_view("GET", "POST")
def donor_collection_view(request):
    if request.method == "GET":
        return api.ok(donor_list(services.list_all()), "Donors retrieved")
    result = services.register(_with_canonical_group(request.payload))
    return api.respond(result, donor_dict, "Donor registered successfully", status=201)


@api.api_view("GET", "PUT", "DELETE")
def donor_detail_view(request, pk):
    if request.method == "PUT":
        result = services.update(pk, _with_canonical_group(request.payload))
        return api.respond(result, donor_dict, "Donor updated successfully")
    if request.method == "DELETE":
        return api.respond(services.delete(pk), None, "Donor deleted successfully")
    return api.respond(services.get(pk), donor_dict, "Donor retrieved")


@api.api_view("GET")
def donor_by_email_view(request, email):
    return api.respond(services.get_by_email(email), donor_dict, "Donor retrieved")


@api.api_view("GET")
def donor_by_group_view(request, blood_group):
    return api.respond(services.by_blood_group(blood_group), donor_list, "Donors retrieved")


@api.api_view("GET")
def donor_eligible_view(request, blood_group=None):
    return api.respond(services.eligible(blood_group), donor_list, "Eligible donors retrieved")


@api.api_view("PUT")
def donor_donation_date_view(request, pk):
    result = services.update_last_donation_date(pk, request.payload)
    return api.respond(result, donor_dict, "Last donation date updated successfully")


@api.api_view("GET")
def donor_search_view(request):
    name = (request.GET.get("name") or "").strip()
    if not name:
        return api.fail(ErrorKind.VALIDATION_ERROR, "Invalid input data provided", {"name": "Search term is required"})
    return api.ok(donor_list(services.search(name)), "Search results retrieved")


@api.api_view("GET")
def donor_statistics_view(request):
    return api.ok(services.statistics(), "Donor statistics retrieved")


@api.api_view("GET")
def donor_recent_view(request):
    return api.ok(donor_list(services.recent()), "Recent donors retrieved")
