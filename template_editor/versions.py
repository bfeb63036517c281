import logging
import secrets
import time
from typing import Callable, List, Optional

from django.utils import timezone

from . import config, files
from .manifest import ORIGINAL, Original, TemplateEntry, Version, VersionRef
from .storage import ContentStore, DatabaseKeyValueStore, ManifestStore

logger = logging.getLogger(__name__)

_BASE36 = '0123456789abcdefghijklmnopqrstuvwxyz'


def _to_base36(number: int) -> str:
    digits = []
    while True:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
        if number == 0:
            break
    return ''.join(reversed(digits))


def generate_version_id() -> str:
    """Millisecond timestamp in base 36 followed by 8 random base-36 chars."""
    millis = int(time.time() * 1000)
    suffix = ''.join(secrets.choice(_BASE36) for _ in range(8))
    return f"v{_to_base36(millis)}{suffix}"


class VersionManager:
    """Named snapshots of template files and the active selection per file.

    Every mutation is a full load, mutate, save cycle on the manifest.
    Unknown template paths read as "no versions, original active".
    """

    def __init__(self, manifests: ManifestStore, contents: ContentStore,
                 fetch_original: Callable[[str], Optional[str]]):
        self.manifests = manifests
        self.contents = contents
        self.fetch_original = fetch_original

    def list_versions(self, template_path: str) -> List[Version]:
        entry = self.manifests.load().templates.get(template_path)
        return list(entry.versions) if entry else []

    def get_active_version(self, template_path: str) -> VersionRef:
        entry = self.manifests.load().templates.get(template_path)
        return entry.active if entry else ORIGINAL

    def create_version(self, template_path: str, name: str, type: str,
                       content: str, description: str = '') -> Version:
        """Snapshot ``content`` under a new id. The active version is left as is."""
        manifest = self.manifests.load()
        entry = manifest.templates.setdefault(template_path, TemplateEntry())

        version = Version(
            id=generate_version_id(),
            name=name,
            type=type,
            created_at=timezone.now().isoformat(),
            description=description,
        )
        entry.versions.append(version)

        self.contents.put(template_path, version.id, content)
        self.manifests.save(manifest)
        logger.info(f"Created version {version.id} ({name}) for {template_path}")
        return version

    def set_active_version(self, template_path: str, ref: VersionRef):
        # Ids are not checked against the entry's versions
        manifest = self.manifests.load()
        entry = manifest.templates.get(template_path)
        if entry is None:
            return
        entry.active = ref
        self.manifests.save(manifest)

    def delete_version(self, template_path: str, version_id: str):
        manifest = self.manifests.load()
        entry = manifest.templates.get(template_path)
        if entry is None:
            return
        # Unknown ids leave both manifest and content untouched
        if entry.find(version_id) is None:
            return

        entry.versions = [v for v in entry.versions if v.id != version_id]
        if entry.active.token == version_id:
            entry.active = ORIGINAL

        self.manifests.save(manifest)
        self.contents.delete(template_path, version_id)
        logger.info(f"Deleted version {version_id} of {template_path}")

    def resolve_content(self, template_path: str, ref: VersionRef) -> Optional[str]:
        if isinstance(ref, Original):
            return self.fetch_original(template_path)
        return self.contents.get(template_path, ref.id)

    def mark_original_backup(self) -> str:
        """Stamp the manifest with the time originals were last backed up."""
        manifest = self.manifests.load()
        manifest.original_backup_timestamp = timezone.now().isoformat()
        self.manifests.save(manifest)
        return manifest.original_backup_timestamp


def get_version_manager(backend=None) -> VersionManager:
    backend = backend or DatabaseKeyValueStore()
    prefix = config.get_config()['STORAGE_KEY']
    return VersionManager(
        ManifestStore(backend, prefix),
        ContentStore(backend, prefix),
        files.fetch_original,
    )
