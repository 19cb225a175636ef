"""Profile form with avatar and resume uploads."""

from django import forms
from portal.models import Profile
from uploader.forms import FileSlotsModelForm

from frontend.forms.auth import INPUT_CLASS

FILE_INPUT_CLASS = "block w-full text-sm text-neutral-600"


class ProfileForm(FileSlotsModelForm):
    """Edit a profile. Leaving a file input empty keeps the current file."""

    class Meta:
        model = Profile
        fields = ("display_name", "avatar", "resume")
        widgets = {
            "display_name": forms.TextInput(attrs={"class": INPUT_CLASS}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for name in self.instance.file_slot_names:
            self.fields[name].widget.attrs["class"] = FILE_INPUT_CLASS
