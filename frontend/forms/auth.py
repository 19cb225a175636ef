"""
Authentication forms for the frontend app.
"""

from django import forms
from django.contrib.auth import get_user_model
from django.contrib.auth.forms import AuthenticationForm

User = get_user_model()

INPUT_CLASS = (
    "w-full px-3 py-2 border border-neutral-300 rounded-lg text-sm "
    "focus:ring-2 focus:ring-primary-500 focus:border-primary-500 "
    "placeholder-neutral-400"
)


class FrontendLoginForm(AuthenticationForm):
    """Email/password login form."""

    username = forms.EmailField(
        label="Email",
        widget=forms.EmailInput(
            attrs={
                "class": INPUT_CLASS,
                "placeholder": "you@example.com",
                "autofocus": True,
            }
        ),
    )
    password = forms.CharField(
        label="Password",
        widget=forms.PasswordInput(attrs={"class": INPUT_CLASS}),
    )

    def clean(self):
        # Resolve email to username so ModelBackend can authenticate.
        email = self.cleaned_data.get("username")
        if email:
            user = User.objects.filter(email=email).first()
            if user is not None:
                self.cleaned_data["username"] = user.username
        return super().clean()
