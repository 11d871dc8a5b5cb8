from django import forms
from django.contrib.auth import get_user_model
from django.forms import formset_factory

from .models import Match


class AssignmentForm(forms.Form):
    referee = forms.ModelChoiceField(queryset=get_user_model().objects.none())

    def __init__(self, *args, club=None, **kwargs):
        super().__init__(*args, **kwargs)
        if club is not None:
            self.fields["referee"].queryset = (
                get_user_model().objects.filter(club_memberships__club=club).distinct()
            )


class MatchForm(forms.Form):
    id = forms.CharField(required=False, widget=forms.HiddenInput)
    description = forms.CharField(max_length=255)
    date = forms.DateField(widget=forms.DateInput(attrs={"type": "date"}))
    time = forms.TimeField(widget=forms.TimeInput(attrs={"type": "time"}, format="%H:%M"))
    location = forms.CharField(max_length=255)
    status = forms.ChoiceField(choices=Match.Status.choices, initial=Match.Status.SCHEDULED)


MatchFormSet = formset_factory(MatchForm, extra=1, can_delete=True)


def match_formset_initial(matches) -> list[dict]:
    return [
        {
            "id": match.pk,
            "description": match.description,
            "date": match.date,
            "time": match.time,
            "location": match.location,
            "status": match.status,
        }
        for match in matches
    ]


def match_payload(formset) -> list[dict]:
    """The rows to keep: filled-in forms not marked for deletion."""
    return [
        {name: value for name, value in form.cleaned_data.items() if name != "DELETE"}
        for form in formset.forms
        if form.cleaned_data and not form.cleaned_data.get("DELETE")
    ]
