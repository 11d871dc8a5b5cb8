from django import forms
from django.contrib.auth.forms import UserCreationForm

from .models import ClubMembership


class SignupForm(UserCreationForm):
    email = forms.EmailField(required=False)
    role = forms.ChoiceField(choices=ClubMembership.Role.choices, widget=forms.RadioSelect)
    club_name = forms.CharField(required=False, max_length=200, help_text="For new admins.")
    club_id = forms.CharField(required=False, max_length=64, help_text="Club code, for referees.")

    class Meta(UserCreationForm.Meta):
        fields = ("username", "email")

    def clean(self):
        cleaned = super().clean()
        role = cleaned.get("role")
        if role == ClubMembership.Role.ADMIN and not cleaned.get("club_name", "").strip():
            self.add_error("club_name", "Name the club you are going to run.")
        if role == ClubMembership.Role.REFEREE and not cleaned.get("club_id", "").strip():
            self.add_error("club_id", "Enter the code your club admin shared with you.")
        return cleaned


class SuggestionForm(forms.Form):
    text = forms.CharField(widget=forms.Textarea(attrs={"rows": 3}))
