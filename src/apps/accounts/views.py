from django.conf import settings
from django.contrib import messages
from django.contrib.admin.views.decorators import staff_member_required
from django.contrib.auth import get_user_model, login
from django.contrib.auth.decorators import login_required
from django.core.exceptions import PermissionDenied, ValidationError
from django.http import HttpResponse, HttpResponseForbidden
from django.shortcuts import get_object_or_404, redirect, render
from django.views.decorators.http import require_POST
from django_ratelimit.decorators import ratelimit

from .decorators import club_admin_required
from .forms import SignupForm, SuggestionForm
from .models import ClubMembership
from .services import (
    create_club,
    demote_admin,
    get_suggestions,
    join_club,
    promote_to_admin,
    register_user,
    remove_member,
    submit_suggestion,
)
from .stats import get_user_stats

MEMBER_ACTIONS = {
    "promote": (promote_to_admin, "Member promoted to admin."),
    "demote": (demote_admin, "Admin role revoked."),
    "remove": (remove_member, "Member removed from the club."),
}


def _submit_rate(*args, **kwargs):
    return settings.REFDESK_SUBMIT_RATE


@ratelimit(key="ip", rate=_submit_rate, method="POST", block=False)
def signup(request):
    if request.user.is_authenticated:
        return redirect("home")
    if request.method == "POST":
        if getattr(request, "limited", False):
            return HttpResponse("Rate limit exceeded. Please wait and try again.", status=429)
        form = SignupForm(request.POST)
        if form.is_valid():
            try:
                user = register_user(
                    username=form.cleaned_data["username"],
                    email=form.cleaned_data["email"],
                    password=form.cleaned_data["password1"],
                    role=form.cleaned_data["role"],
                    club_name=form.cleaned_data["club_name"],
                    club_id=form.cleaned_data["club_id"],
                )
            except ValidationError as exc:
                form.add_error(None, exc.messages[0])
            else:
                login(request, user, backend="django.contrib.auth.backends.ModelBackend")
                messages.success(request, "Welcome to RefDesk.")
                if form.cleaned_data["role"] == ClubMembership.Role.ADMIN:
                    club = user.club_memberships.get(role=ClubMembership.Role.ADMIN).club
                    return redirect("matches:schedule", club_id=club.pk)
                return redirect("home")
    else:
        form = SignupForm()
    return render(request, "registration/signup.html", {"form": form})


@login_required
def my_stats(request):
    return render(request, "accounts/stats.html", {"stats": get_user_stats(request.user)})


@require_POST
@login_required
def create_club_view(request):
    try:
        club = create_club(owner=request.user, name=request.POST.get("name", ""))
    except ValidationError as exc:
        messages.error(request, exc.messages[0])
        return redirect("home")
    messages.success(request, f"Club created. Share the code {club.pk} with your referees.")
    return redirect("matches:schedule", club_id=club.pk)


@require_POST
@login_required
def join_club_view(request):
    try:
        club = join_club(user=request.user, club_id=request.POST.get("club_id", ""))
    except ValidationError as exc:
        messages.error(request, exc.messages[0])
    else:
        messages.success(request, f"You joined {club.name}.")
    return redirect("home")


@require_POST
@club_admin_required
def member_action_view(request, club, user_id: int, action: str):
    if action not in MEMBER_ACTIONS:
        return HttpResponseForbidden("Unknown action")
    member = get_object_or_404(get_user_model(), pk=user_id)
    service, done_message = MEMBER_ACTIONS[action]
    try:
        service(club=club, actor=request.user, user=member)
    except PermissionDenied:
        return HttpResponseForbidden("Club admin access required")
    except ValidationError as exc:
        return HttpResponseForbidden(exc.messages[0])
    messages.success(request, done_message)
    return redirect("matches:schedule", club_id=club.pk)


@ratelimit(key="user_or_ip", rate=_submit_rate, block=False)
@require_POST
def suggest(request):
    if getattr(request, "limited", False):
        return HttpResponse("Rate limit exceeded. Please wait and try again.", status=429)
    form = SuggestionForm(request.POST)
    try:
        if not form.is_valid():
            raise ValidationError("Write your suggestion first.")
        submit_suggestion(user=request.user, text=form.cleaned_data["text"])
    except ValidationError as exc:
        messages.error(request, exc.messages[0])
    else:
        messages.success(request, "Thanks, your suggestion was sent.")
    return redirect("home")


@staff_member_required
def suggestions(request):
    return render(
        request, "accounts/suggestions.html", {"suggestions": get_suggestions(request.user)}
    )
