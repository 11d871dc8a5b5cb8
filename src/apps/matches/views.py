from django.conf import settings
from django.contrib import messages
from django.core.exceptions import PermissionDenied, ValidationError
from django.http import HttpResponse, HttpResponseForbidden
from django.shortcuts import get_object_or_404, redirect, render
from django.views.decorators.http import require_POST
from django_htmx.http import HttpResponseClientRefresh
from django_ratelimit.decorators import ratelimit

from apps.accounts.decorators import club_admin_required
from .exceptions import MatchSaveError
from .forms import AssignmentForm, MatchFormSet, match_formset_initial, match_payload
from .models import Match
from .services import assign_referee, get_club_schedule, save_club_matches, unassign_referee

MATCH_FORMSET_PREFIX = "matches"


def _assign_rate(*args, **kwargs):
    return settings.REFDESK_SUBMIT_RATE


def _back_to_schedule(request, club):
    if request.htmx:
        return HttpResponseClientRefresh()
    return redirect("matches:schedule", club_id=club.pk)


def _first_formset_error(formset) -> str:
    for error in formset.non_form_errors():
        return error
    for form_errors in formset.errors:
        for errors in form_errors.values():
            return errors[0]
    return "Invalid match list."


@club_admin_required
def club_schedule(request, club):
    schedule = get_club_schedule(club)
    match_formset = MatchFormSet(
        initial=match_formset_initial(row.match for row in schedule.matches),
        prefix=MATCH_FORMSET_PREFIX,
    )
    return render(
        request,
        "matches/club_schedule.html",
        {
            "schedule": schedule,
            "assignment_form": AssignmentForm(club=club),
            "match_formset": match_formset,
        },
    )


@ratelimit(key="user_or_ip", rate=_assign_rate, block=False)
@require_POST
@club_admin_required
def save_matches_view(request, club):
    if getattr(request, "limited", False):
        return HttpResponse("Rate limit exceeded. Please wait and try again.", status=429)

    formset = MatchFormSet(request.POST, prefix=MATCH_FORMSET_PREFIX)
    if not formset.is_valid():
        return HttpResponseForbidden(_first_formset_error(formset))

    try:
        saved = save_club_matches(club=club, matches=match_payload(formset), actor=request.user)
    except PermissionDenied:
        return HttpResponseForbidden("Club admin access required")
    except ValidationError as exc:
        return HttpResponseForbidden(exc.messages[0])

    messages.success(request, f"Match list saved ({len(saved)} matches).")
    return _back_to_schedule(request, club)


@ratelimit(key="user_or_ip", rate=_assign_rate, block=False)
@require_POST
@club_admin_required
def assign_referee_view(request, club, match_id: str):
    if getattr(request, "limited", False):
        return HttpResponse("Rate limit exceeded. Please wait and try again.", status=429)
    match = get_object_or_404(Match, pk=match_id, club=club)

    form = AssignmentForm(request.POST, club=club)
    if not form.is_valid():
        return HttpResponseForbidden("Pick a member of this club.")

    try:
        assign_referee(match=match, referee=form.cleaned_data["referee"], actor=request.user)
    except PermissionDenied:
        return HttpResponseForbidden("Club admin access required")
    except ValidationError as exc:
        return HttpResponseForbidden(exc.messages[0])
    except MatchSaveError as exc:
        messages.error(request, exc.message)
        return redirect("matches:schedule", club_id=club.pk)

    messages.success(request, f"Referee assigned to {match.description}.")
    return _back_to_schedule(request, club)


@require_POST
@club_admin_required
def unassign_referee_view(request, club, match_id: str):
    match = get_object_or_404(Match, pk=match_id, club=club)
    if unassign_referee(match=match, actor=request.user):
        messages.success(request, f"Assignment removed from {match.description}.")
    return _back_to_schedule(request, club)
