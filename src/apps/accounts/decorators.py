from functools import wraps

from django.contrib.auth.decorators import login_required
from django.http import HttpResponseForbidden
from django.shortcuts import get_object_or_404

from .models import Club
from .utils import is_club_admin, is_club_member


def club_admin_required(view_func):
    """Resolve the ``club_id`` URL kwarg and require an admin membership."""

    @login_required
    @wraps(view_func)
    def _wrapped(request, club_id, *args, **kwargs):
        club = get_object_or_404(Club, pk=club_id)
        if not is_club_admin(request.user, club):
            return HttpResponseForbidden("Club admin access required")
        return view_func(request, club, *args, **kwargs)

    return _wrapped


def club_member_required(view_func):
    @login_required
    @wraps(view_func)
    def _wrapped(request, club_id, *args, **kwargs):
        club = get_object_or_404(Club, pk=club_id)
        if not is_club_member(request.user, club):
            return HttpResponseForbidden("Club membership required")
        return view_func(request, club, *args, **kwargs)

    return _wrapped
