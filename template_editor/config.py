"""Editor settings, read from ``settings.TEMPLATE_EDITOR`` on every call."""
from pathlib import Path

from django.conf import settings

APP_TYPES = ['Companion', 'Assistant', 'Roleplay', 'Storytelling']

DEFAULTS = {
    'BASE_DIR': '.',
    'TEMPLATE_DIRS': [
        'Resources/Prompts/Default/en',
        'Resources/Modules/ChainOfThought/en',
        'Resources/Modules/Continuations/en',
        'Resources/Formatting',
    ],
    'TEMPLATE_EXTENSION': '.scriban',
    'BACKUP_DIR': 'Data/TemplateBackups',
    'STORAGE_KEY': 'template-editor-state',
    'PROMPTS_ROOT': 'Resources/Prompts/Default/en',
    'MODULES_ROOT': 'Resources/Modules',
}


def get_config():
    config = dict(DEFAULTS)
    config.update(getattr(settings, 'TEMPLATE_EDITOR', None) or {})
    return config


def base_dir() -> Path:
    return Path(get_config()['BASE_DIR']).resolve()


def backup_dir() -> Path:
    # Relative backup dirs live under the template root
    return base_dir() / get_config()['BACKUP_DIR']
