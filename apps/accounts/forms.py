"""Forms for member management."""

from django import forms

from .invitations import is_workspace_member
from .models import Profile


class InviteForm(forms.Form):
    full_name = forms.CharField(
        max_length=120,
        error_messages={"required": "名前を入力してください"},
    )
    email = forms.EmailField(
        error_messages={
            "required": "有効なメールアドレスを入力してください",
            "invalid": "有効なメールアドレスを入力してください",
        },
    )

    def clean_full_name(self):
        full_name = self.cleaned_data["full_name"].strip()
        if not full_name:
            raise forms.ValidationError("名前を入力してください")
        return full_name

    def clean_email(self):
        email = self.cleaned_data["email"].lower()
        if not is_workspace_member(email):
            raise forms.ValidationError("ワークスペースのメンバーではありません")
        return email


class RemoveMemberForm(forms.Form):
    """Select the profile to remove; an admin cannot remove themselves."""

    user_id = forms.ModelChoiceField(
        queryset=Profile.objects.all(),
        error_messages={
            "required": "メンバーを選択してください",
            "invalid_choice": "メンバーが見つかりません",
        },
    )

    def __init__(self, *args, acting_profile=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.acting_profile = acting_profile

    def clean_user_id(self):
        profile = self.cleaned_data["user_id"]
        if self.acting_profile is not None and profile.pk == self.acting_profile.pk:
            raise forms.ValidationError("自分自身は削除できません")
        return profile
