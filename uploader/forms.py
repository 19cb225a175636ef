"""ModelForm support for FileSlotsModel uploads."""

from django import forms
from django.core.files.base import File

from uploader.services.slots import RawUpload


class FileSlotsModelForm(forms.ModelForm):
    """ModelForm that accepts uploads for its model's file slots.

    Slot fields are rendered as file inputs. During ``clean()`` each slot
    is prepared: an uploaded file is renamed and attached as pending, and
    a slot left empty keeps the filename the row already had. The upload
    is written to storage when the instance is saved.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for name in self.instance.file_slot_names:
            if name in self.fields:
                self.fields[name] = self.instance.slot_form_field(name)

    def clean(self):
        cleaned_data = super().clean()
        manager = self.instance.file_slots
        for name in self.instance.file_slot_names:
            if name not in self.fields or name in self.errors:
                continue
            upload = cleaned_data.get(name)
            # An untouched file input cleans to the initial filename string.
            incoming = RawUpload.from_uploaded_file(upload) if isinstance(upload, File) else None
            cleaned_data[name] = manager.prepare_ingest(name, incoming, record=self.instance)
        return cleaned_data
