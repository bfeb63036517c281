from django.urls import include, path

urlpatterns = [
    path('', include('template_editor.urls')),
]
