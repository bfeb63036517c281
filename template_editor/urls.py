from django.urls import path
from . import views

urlpatterns = [
    path('api/v1/files/', views.TemplateFileListView.as_view(), name='template-file-list'),
    path('api/v1/files/<path:template_path>', views.TemplateFileView.as_view(), name='template-file'),
    path('api/v1/catalog/', views.CatalogView.as_view(), name='catalog'),
    path('api/v1/versions/', views.VersionListCreateView.as_view(), name='version-list'),
    path('api/v1/versions/activate/', views.ActivateVersionView.as_view(), name='version-activate'),
    path('api/v1/versions/<str:version_id>/', views.VersionDetailView.as_view(), name='version-detail'),
    path('api/v1/versions/<str:version_id>/content/', views.VersionContentView.as_view(), name='version-content'),
    path('api/v1/diff/', views.DiffView.as_view(), name='diff'),
    path('api/v1/backups/originals/', views.OriginalBackupView.as_view(), name='original-backup'),
    path('health/', views.HealthCheckView.as_view(), name='health-check'),
]
