"""Read, write and list template files under the trusted template root."""
import logging
import shutil
from pathlib import Path
from typing import List, Optional

from django.utils import timezone

from . import config

logger = logging.getLogger(__name__)


class InvalidTemplatePath(Exception):
    """The requested path resolves outside the template root."""


def _resolve(template_path: str) -> Path:
    if '\x00' in template_path:
        raise InvalidTemplatePath(template_path)
    root = config.base_dir()
    try:
        target = (root / template_path).resolve()
        target.relative_to(root)
    except ValueError as exc:
        raise InvalidTemplatePath(template_path) from exc
    if target == root:
        raise InvalidTemplatePath(template_path)
    return target


def list_templates() -> List[str]:
    cfg = config.get_config()
    root = config.base_dir()
    pattern = f"*{cfg['TEMPLATE_EXTENSION']}"

    templates = []
    for directory in cfg['TEMPLATE_DIRS']:
        full_dir = root / directory
        if not full_dir.is_dir():
            logger.warning(f"Template directory not found: {full_dir}")
            continue
        try:
            for file_path in sorted(full_dir.rglob(pattern)):
                if file_path.is_file():
                    templates.append(file_path.relative_to(root).as_posix())
        except OSError as e:
            logger.error(f"Error scanning {full_dir}: {str(e)}")
    return templates


def read_template(template_path: str) -> Optional[str]:
    target = _resolve(template_path)
    if not target.is_file():
        return None
    return target.read_text(encoding='utf-8')


def _backup_name(template_path: str) -> str:
    stamp = timezone.now().strftime('%Y-%m-%dT%H-%M-%S-%fZ')
    return f"{template_path.replace('/', '_')}.{stamp}.bak"


def write_template(template_path: str, content: str) -> Optional[Path]:
    """Write ``content`` to the file, copying any existing file aside first.

    Returns the backup path, or None when there was nothing to back up.
    """
    target = _resolve(template_path)

    backup_path = None
    if target.exists():
        backups = config.backup_dir()
        backups.mkdir(parents=True, exist_ok=True)
        backup_path = backups / _backup_name(template_path)
        shutil.copyfile(target, backup_path)
        logger.info(f"Backed up {template_path} to {backup_path}")

    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding='utf-8')
    return backup_path


def fetch_original(template_path: str) -> Optional[str]:
    """Current file content, or None when it cannot be read for any reason."""
    try:
        return read_template(template_path)
    except InvalidTemplatePath:
        logger.warning(f"Refusing to read template outside root: {template_path}")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not fetch template {template_path}: {str(e)}")
    return None


def write_to_disk(template_path: str, content: str) -> bool:
    try:
        write_template(template_path, content)
    except InvalidTemplatePath:
        logger.warning(f"Refusing to write template outside root: {template_path}")
        return False
    except OSError as e:
        logger.error(f"Could not save template {template_path}: {str(e)}")
        return False
    return True
