import logging

from blood import api, forms
from blood.models import parse_blood_group
from blood.results import ErrorKind, Result, form_errors
from blood.serializers import audit_dict, inventory_dict, many, request_dict
from blood.services import dashboard, ledger, lifecycle


logger = logging.getLogger(__name__)


def _actor(request):
    user = getattr(request, "user", None)
    if user is not None and user.is_authenticated:
        return user.get_username()
    return ""


def _with_canonical_group(payload):
    data = dict(payload)
    if "blood_group" in data:
        data["blood_group"] = parse_blood_group(data["blood_group"]) or data["blood_group"]
    return data


def _invalid_form(form):
    return api.fail(ErrorKind.VALIDATION_ERROR, "Invalid input data provided", form_errors(form))


# ---------------------------------------------------------------------------
# Inventory
# ---------------------------------------------------------------------------


@api.api_view("GET", "POST")
def inventory_collection_view(request):
    if request.method == "GET":
        return api.ok([inventory_dict(inventory) for inventory in ledger.list_all()], "Blood inventory retrieved")

    form = forms.InventoryCreateForm(_with_canonical_group(request.payload))
    if not form.is_valid():
        return _invalid_form(form)
    data = form.cleaned_data
    result = ledger.create_group(
        data["blood_group"],
        data["units_available"],
        data["minimum_stock"],
        data["maximum_capacity"],
        notes=data["notes"],
        actor=_actor(request),
    )
    return api.respond(result, inventory_dict, "Blood inventory created successfully", status=201)


@api.api_view("GET", "PUT")
def inventory_detail_view(request, pk):
    found = ledger.get_by_id(pk)
    if request.method == "GET" or not found.ok:
        return api.respond(found, inventory_dict, "Blood inventory retrieved")

    form = forms.InventoryUpdateForm(request.payload)
    if not form.is_valid():
        return _invalid_form(form)
    result = ledger.update_bounds(
        found.value.blood_group,
        minimum_stock=form.cleaned_data["minimum_stock"],
        maximum_capacity=form.cleaned_data["maximum_capacity"],
        notes=form.cleaned_data["notes"] if "notes" in request.payload else None,
        actor=_actor(request),
    )
    return api.respond(result, inventory_dict, "Blood inventory updated successfully")


@api.api_view("GET")
def inventory_by_group_view(request, blood_group):
    return api.respond(ledger.get_by_group(blood_group), inventory_dict, "Blood inventory retrieved")


def _adjust_units(request, pk, removing):
    found = ledger.get_by_id(pk)
    if not found.ok:
        return api.error_response(found.error)

    form = forms.UnitsAdjustmentForm(request.payload)
    if not form.is_valid():
        return _invalid_form(form)

    adjust = ledger.remove_units if removing else ledger.add_units
    result = adjust(
        found.value.blood_group,
        form.cleaned_data["units"],
        notes=form.cleaned_data["notes"],
        actor=_actor(request),
    )
    message = "Units removed successfully" if removing else "Units added successfully"
    return api.respond(result, inventory_dict, message)


@api.api_view("PUT")
def inventory_add_units_view(request, pk):
    return _adjust_units(request, pk, removing=False)


@api.api_view("PUT")
def inventory_remove_units_view(request, pk):
    return _adjust_units(request, pk, removing=True)


@api.api_view("GET")
def inventory_critical_view(request):
    return api.ok(many(inventory_dict)(ledger.critical()), "Critical stock levels retrieved")


@api.api_view("GET")
def inventory_low_stock_view(request):
    return api.ok(many(inventory_dict)(ledger.low_stock()), "Low stock levels retrieved")


@api.api_view("GET")
def inventory_out_of_stock_view(request):
    return api.ok(many(inventory_dict)(ledger.out_of_stock()), "Out of stock blood groups retrieved")


@api.api_view("GET")
def inventory_availability_view(request):
    return api.ok(ledger.availability(), "Blood availability retrieved")


@api.api_view("GET")
def inventory_availability_check_view(request, blood_group, units):
    group = parse_blood_group(blood_group)
    if group is None:
        return api.fail(ErrorKind.VALIDATION_ERROR, "Invalid blood group format", {"blood_group": f"Invalid blood group: {blood_group}"})
    return api.ok(
        {
            "blood_group": group,
            "units_requested": units,
            "available": ledger.has_sufficient_units(group, units),
        },
        "Availability checked",
    )


@api.api_view("GET")
def inventory_statistics_view(request):
    return api.ok(ledger.statistics(), "Inventory statistics retrieved")


@api.api_view("POST")
def inventory_initialize_view(request):
    created = ledger.initialize_blood_groups()
    return api.ok({"created": created}, "Blood groups initialized")


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


@api.api_view("GET", "POST")
def request_collection_view(request):
    if request.method == "GET":
        return api.ok(many(request_dict)(lifecycle.list_all()), "Blood requests retrieved")

    result = lifecycle.submit(_with_canonical_group(request.payload))
    return api.respond(result, request_dict, "Blood request created successfully", status=201)


@api.api_view("GET", "DELETE")
def request_detail_view(request, pk):
    if request.method == "DELETE":
        return api.respond(lifecycle.delete(pk), None, "Blood request deleted successfully")
    return api.respond(lifecycle.get(pk), request_dict, "Blood request retrieved")


@api.api_view("PUT")
def request_status_view(request, pk):
    payload = dict(request.payload)
    if isinstance(payload.get("status"), str):
        payload["status"] = payload["status"].strip().upper()
    form = forms.StatusUpdateForm(payload)
    if not form.is_valid():
        return _invalid_form(form)
    result = lifecycle.transition(
        pk,
        form.cleaned_data["status"],
        admin_notes=form.cleaned_data["admin_notes"],
        processed_by=form.cleaned_data["processed_by"],
    )
    return api.respond(result, request_dict, "Blood request status updated successfully")


@api.api_view("PUT")
def request_approve_fulfill_view(request, pk):
    form = forms.ProcessForm(request.payload)
    if not form.is_valid():
        return _invalid_form(form)
    result = lifecycle.approve_and_fulfill(
        pk,
        admin_notes=form.cleaned_data["admin_notes"],
        processed_by=form.cleaned_data["processed_by"],
    )
    return api.respond(result, request_dict, "Blood request approved and fulfilled successfully")


@api.api_view("PUT")
def request_cancel_view(request, pk):
    form = forms.CancelForm(request.payload)
    if not form.is_valid():
        return _invalid_form(form)
    result = lifecycle.cancel(pk, form.cleaned_data["reason"])
    return api.respond(result, request_dict, "Blood request cancelled successfully")


@api.api_view("GET")
def request_by_status_view(request, status):
    return api.respond(lifecycle.by_status(status), many(request_dict), "Blood requests retrieved")


@api.api_view("GET")
def request_pending_view(request):
    return api.ok(many(request_dict)(lifecycle.pending()), "Pending requests retrieved")


@api.api_view("GET")
def request_emergency_view(request):
    return api.ok(many(request_dict)(lifecycle.emergency()), "Emergency requests retrieved")


@api.api_view("GET")
def request_by_group_view(request, blood_group):
    return api.respond(lifecycle.by_blood_group(blood_group), many(request_dict), "Blood requests retrieved")


@api.api_view("GET")
def request_by_email_view(request, email):
    return api.ok(many(request_dict)(lifecycle.by_email(email)), "Blood requests retrieved")


@api.api_view("GET")
def request_recent_view(request):
    return api.ok(many(request_dict)(lifecycle.recent()), "Recent requests retrieved")


@api.api_view("GET")
def request_overdue_view(request):
    return api.ok(many(request_dict)(lifecycle.overdue()), "Overdue requests retrieved")


def _search_term(request):
    name = (request.GET.get("name") or "").strip()
    if not name:
        return Result.invalid({"name": "Search term is required"})
    return Result.success(name)


@api.api_view("GET")
def request_search_hospital_view(request):
    term = _search_term(request)
    if not term.ok:
        return api.error_response(term.error)
    return api.ok(many(request_dict)(lifecycle.search_by_hospital(term.value)), "Search results retrieved")


@api.api_view("GET")
def request_search_patient_view(request):
    term = _search_term(request)
    if not term.ok:
        return api.error_response(term.error)
    return api.ok(many(request_dict)(lifecycle.search_by_patient(term.value)), "Search results retrieved")


@api.api_view("GET")
def request_statistics_view(request):
    return api.ok(lifecycle.statistics(), "Request statistics retrieved")


@api.api_view("GET")
def request_group_statistics_view(request):
    return api.ok(lifecycle.blood_group_statistics(), "Blood group statistics retrieved")


@api.api_view("GET")
def request_audit_view(request, pk):
    return api.respond(lifecycle.audit_trail(pk), many(audit_dict), "Audit trail retrieved")


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------


@api.api_view("GET")
def dashboard_stats_view(request):
    return api.ok(dashboard.stats().as_dict(), "Dashboard statistics retrieved")


@api.api_view("GET")
def dashboard_summary_view(request):
    return api.ok(dashboard.summary(), "Dashboard summary retrieved")


@api.api_view("GET")
def dashboard_health_view(request):
    return api.ok({"status": dashboard.health()}, "System health retrieved")
