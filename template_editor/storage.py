"""Key-value persistence for version content and the manifest.

Both stores sit on a key-value backend exposing ``get(key)``,
``set(key, value)`` and ``delete(key)``. ``DatabaseKeyValueStore`` is the
default backend; ``MemoryKeyValueStore`` keeps everything in a dict.

Key layout, with ``prefix`` being ``TEMPLATE_EDITOR['STORAGE_KEY']``:

    <prefix>-manifest                      serialized Manifest
    <prefix>-content-<path>-<version id>   raw version text
"""
import json
import logging

from .manifest import Manifest
from .models import StoredValue

logger = logging.getLogger(__name__)


class MemoryKeyValueStore:
    def __init__(self, initial=None):
        self._data = dict(initial or {})

    def get(self, key):
        return self._data.get(key)

    def set(self, key, value):
        self._data[key] = value

    def delete(self, key):
        self._data.pop(key, None)


class DatabaseKeyValueStore:
    """Backend storing each key as a ``StoredValue`` row."""

    def get(self, key):
        try:
            return StoredValue.objects.get(pk=key).value
        except StoredValue.DoesNotExist:
            return None

    def set(self, key, value):
        StoredValue.objects.update_or_create(key=key, defaults={'value': value})

    def delete(self, key):
        StoredValue.objects.filter(pk=key).delete()


class ContentStore:
    """Raw version text addressed by (template path, version id)."""

    def __init__(self, backend, prefix: str):
        self.backend = backend
        self.prefix = prefix

    def _key(self, template_path: str, version_id: str) -> str:
        return f"{self.prefix}-content-{template_path}-{version_id}"

    def get(self, template_path: str, version_id: str):
        return self.backend.get(self._key(template_path, version_id))

    def put(self, template_path: str, version_id: str, text: str):
        self.backend.set(self._key(template_path, version_id), text)

    def delete(self, template_path: str, version_id: str):
        self.backend.delete(self._key(template_path, version_id))


class ManifestStore:
    """Whole-document load/save of the manifest.

    There is no locking: two overlapping load/save cycles race and the
    last save wins.
    """

    def __init__(self, backend, prefix: str):
        self.backend = backend
        self.key = f"{prefix}-manifest"

    def load(self) -> Manifest:
        raw = self.backend.get(self.key)
        if raw:
            try:
                return Manifest.from_dict(json.loads(raw))
            except (ValueError, KeyError, TypeError, AttributeError) as e:
                logger.error(f"Failed to parse manifest {self.key}: {str(e)}")
        return Manifest()

    def save(self, manifest: Manifest):
        self.backend.set(self.key, json.dumps(manifest.to_dict()))
