from django.apps import AppConfig


class TemplateEditorConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'template_editor'
    verbose_name = 'Template editor'
