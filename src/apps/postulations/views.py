from django.conf import settings
from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.core.exceptions import PermissionDenied, ValidationError
from django.http import Http404, HttpResponse, HttpResponseForbidden
from django.shortcuts import get_object_or_404, redirect, render
from django.views.decorators.http import require_POST
from django_htmx.http import HttpResponseClientRefresh
from django_ratelimit.decorators import ratelimit

from apps.accounts.decorators import club_member_required
from .exceptions import PostulationNotFound, PostulationSaveError
from .forms import PostulationForm
from .models import Postulation
from .services import (
    complete_postulation,
    get_availability_data,
    submit_postulation,
    update_postulation,
)


def _submit_rate(*args, **kwargs):
    return settings.REFDESK_SUBMIT_RATE


def _done(request, message):
    messages.success(request, message)
    if request.htmx:
        return HttpResponseClientRefresh()
    return redirect("home")


def _first_error(form) -> str:
    for errors in form.errors.values():
        return errors[0]
    return "Invalid postulation."


@login_required
def availability(request):
    data = get_availability_data(request.user)
    rows = []
    for entry in data.clubs.values():
        initial = {}
        if entry.postulation is not None:
            initial = {
                "match_ids": [match.pk for match in entry.selected_matches],
                "has_car": entry.postulation.has_car,
                "notes": entry.postulation.notes,
            }
        rows.append((entry, PostulationForm(initial=initial, club=entry.club)))
    return render(request, "postulations/availability.html", {"data": data, "rows": rows})


@ratelimit(key="user_or_ip", rate=_submit_rate, block=False)
@require_POST
@club_member_required
def submit_postulation_view(request, club):
    if getattr(request, "limited", False):
        return HttpResponse("Rate limit exceeded. Please wait and try again.", status=429)

    form = PostulationForm(request.POST, club=club)
    if not form.is_valid():
        return HttpResponseForbidden(_first_error(form))

    try:
        submit_postulation(
            user=request.user,
            club=club,
            match_ids=form.cleaned_data["match_ids"],
            has_car=form.cleaned_data["has_car"],
            notes=form.cleaned_data["notes"],
        )
    except PermissionDenied:
        return HttpResponseForbidden("You cannot apply to this club's matches")
    except ValidationError as exc:
        return HttpResponseForbidden(exc.messages[0])
    except PostulationSaveError as exc:
        messages.error(request, exc.message)
        return redirect("home")

    return _done(request, "Postulation submitted.")


@ratelimit(key="user_or_ip", rate=_submit_rate, block=False)
@require_POST
@login_required
def update_postulation_view(request, pk: str):
    if getattr(request, "limited", False):
        return HttpResponse("Rate limit exceeded. Please wait and try again.", status=429)

    # Ownership is enforced by the service; another user's postulation is a 404.
    postulation = Postulation.objects.filter(pk=pk, user=request.user).select_related("club").first()
    if postulation is None:
        raise Http404("Postulation not found")

    form = PostulationForm(request.POST, club=postulation.club)
    if not form.is_valid():
        return HttpResponseForbidden(_first_error(form))

    try:
        update_postulation(
            postulation_id=postulation.pk,
            user=request.user,
            match_ids=form.cleaned_data["match_ids"],
            has_car=form.cleaned_data["has_car"],
            notes=form.cleaned_data["notes"],
        )
    except PostulationNotFound as exc:
        raise Http404("Postulation not found") from exc
    except ValidationError as exc:
        return HttpResponseForbidden(exc.messages[0])
    except PostulationSaveError as exc:
        messages.error(request, exc.message)
        return redirect("home")

    return _done(request, "Postulation updated.")


@require_POST
@login_required
def complete_postulation_view(request, pk: str):
    postulation = get_object_or_404(Postulation, pk=pk)
    try:
        complete_postulation(postulation=postulation, actor=request.user)
    except PermissionDenied:
        return HttpResponseForbidden("Club admin access required")
    except ValidationError as exc:
        return HttpResponseForbidden(exc.messages[0])
    messages.success(request, "Postulation marked as completed.")
    if request.htmx:
        return HttpResponseClientRefresh()
    return redirect("matches:schedule", club_id=postulation.club_id)
