"""Version metadata and the per-template manifest document.

The manifest is persisted as one JSON object::

    {
        "templates": {
            "<template path>": {
                "activeVersionId": "original" | "<version id>",
                "versions": [{"id", "name", "type", "createdAt",
                              "description", "isOriginal"}, ...]
            }
        },
        "originalBackupTimestamp": null | "<ISO timestamp>"
    }

The live file on disk is never stored as a version. It is addressed by the
``ORIGINAL`` reference, which serializes to the reserved id ``"original"``.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

ORIGINAL_ID = 'original'


@dataclass(frozen=True)
class Original:
    """Reference to the unmanaged file content."""

    @property
    def token(self) -> str:
        return ORIGINAL_ID


@dataclass(frozen=True)
class Stored:
    """Reference to a stored version by id."""
    id: str

    @property
    def token(self) -> str:
        return self.id


ORIGINAL = Original()

VersionRef = Union[Original, Stored]


def parse_ref(token: str) -> VersionRef:
    if token == ORIGINAL_ID:
        return ORIGINAL
    return Stored(token)


@dataclass(frozen=True)
class Version:
    id: str
    name: str
    type: str
    created_at: str
    description: str = ''
    is_original: bool = False

    @property
    def ref(self) -> Stored:
        return Stored(self.id)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'type': self.type,
            'createdAt': self.created_at,
            'description': self.description,
            'isOriginal': self.is_original,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=str(data['id']),
            name=data['name'],
            type=data['type'],
            created_at=data['createdAt'],
            description=data.get('description', ''),
            is_original=bool(data.get('isOriginal', False)),
        )


@dataclass
class TemplateEntry:
    active: VersionRef = ORIGINAL
    versions: List[Version] = field(default_factory=list)

    def find(self, version_id: str) -> Optional[Version]:
        for version in self.versions:
            if version.id == version_id:
                return version
        return None

    def to_dict(self):
        return {
            'activeVersionId': self.active.token,
            'versions': [version.to_dict() for version in self.versions],
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            active=parse_ref(data.get('activeVersionId', ORIGINAL_ID)),
            versions=[Version.from_dict(item) for item in data.get('versions', [])],
        )


@dataclass
class Manifest:
    templates: Dict[str, TemplateEntry] = field(default_factory=dict)
    original_backup_timestamp: Optional[str] = None

    def to_dict(self):
        return {
            'templates': {path: entry.to_dict() for path, entry in self.templates.items()},
            'originalBackupTimestamp': self.original_backup_timestamp,
        }

    @classmethod
    def from_dict(cls, data):
        templates = data.get('templates') or {}
        return cls(
            templates={str(path): TemplateEntry.from_dict(entry) for path, entry in templates.items()},
            original_backup_timestamp=data.get('originalBackupTimestamp'),
        )
