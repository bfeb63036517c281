from rest_framework import serializers

from .config import APP_TYPES


class VersionSerializer(serializers.Serializer):
    """Read-only view of a ``manifest.Version``."""
    id = serializers.CharField(read_only=True)
    name = serializers.CharField(read_only=True)
    type = serializers.CharField(read_only=True)
    created_at = serializers.CharField(read_only=True)
    description = serializers.CharField(read_only=True)
    is_original = serializers.BooleanField(read_only=True)


class CreateVersionSerializer(serializers.Serializer):
    path = serializers.CharField()
    name = serializers.CharField()
    type = serializers.ChoiceField(choices=APP_TYPES)
    # Template text is stored exactly as sent
    content = serializers.CharField(allow_blank=True, trim_whitespace=False)
    description = serializers.CharField(allow_blank=True, required=False, default='')


class ActivateVersionSerializer(serializers.Serializer):
    path = serializers.CharField()
    version_id = serializers.CharField()


class TemplateFileWriteSerializer(serializers.Serializer):
    content = serializers.CharField(trim_whitespace=False)


class DiffRequestSerializer(serializers.Serializer):
    """Each side of the diff is either literal text or a version of ``path``."""
    path = serializers.CharField(required=False)
    old_text = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
    new_text = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
    old_version = serializers.CharField(required=False)
    new_version = serializers.CharField(required=False)

    def validate(self, attrs):
        for side in ('old', 'new'):
            has_text = f"{side}_text" in attrs
            has_version = f"{side}_version" in attrs
            if has_text == has_version:
                raise serializers.ValidationError(
                    f"Provide exactly one of {side}_text or {side}_version."
                )
            if has_version and not attrs.get('path'):
                raise serializers.ValidationError(
                    f"path is required when {side}_version is given."
                )
        return attrs
