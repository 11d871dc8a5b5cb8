from django import forms
from django.conf import settings

from apps.matches.models import Match


class PostulationForm(forms.Form):
    match_ids = forms.MultipleChoiceField(
        widget=forms.CheckboxSelectMultiple,
        error_messages={"required": "Select at least one match."},
    )
    has_car = forms.BooleanField(required=False)
    notes = forms.CharField(required=False, widget=forms.Textarea(attrs={"rows": 3}))

    def __init__(self, *args, club=None, **kwargs):
        super().__init__(*args, **kwargs)
        matches = Match.objects.filter(club=club) if club is not None else Match.objects.none()
        self.fields["match_ids"].choices = [(match.pk, str(match)) for match in matches]

    def clean_notes(self):
        notes = self.cleaned_data.get("notes", "")
        limit = settings.REFDESK_NOTES_MAX_LENGTH
        if len(notes) > limit:
            raise forms.ValidationError(f"Notes cannot exceed {limit} characters.")
        return notes
