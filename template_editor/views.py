from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView
from django.db import connection
import logging

from . import catalog, config, diff, files
from .config import APP_TYPES
from .manifest import parse_ref
from .serializers import (
    ActivateVersionSerializer,
    CreateVersionSerializer,
    DiffRequestSerializer,
    TemplateFileWriteSerializer,
    VersionSerializer,
)
from .versions import get_version_manager

logger = logging.getLogger(__name__)


def _envelope_response(success: bool, data=None, message: str = "", error: str = None, meta: dict = None):
    """Standard response envelope."""
    payload = {
        "success": success,
        "data": data,
        "error": error,
        "message": message,
        "meta": meta or {}
    }
    return payload


def _missing_path_response():
    return Response(
        _envelope_response(False, data=None, message="Missing path", error="missing_path"),
        status=status.HTTP_400_BAD_REQUEST
    )


def _invalid_path_response(template_path):
    return Response(
        _envelope_response(False, data=None, message=f"Invalid path: {template_path}", error="invalid_path"),
        status=status.HTTP_400_BAD_REQUEST
    )


class TemplateFileListView(APIView):
    def get(self, request, *args, **kwargs):
        manifest = get_version_manager().manifests.load()
        templates = []
        for template_path in files.list_templates():
            entry = manifest.templates.get(template_path)
            templates.append({
                "path": template_path,
                "category": catalog.category_for_path(template_path),
                "modified": bool(entry and entry.versions),
            })
        return Response(_envelope_response(
            True,
            data=templates,
            message="Templates retrieved",
            meta={"total": len(templates)}
        ))


class TemplateFileView(APIView):
    """Read or overwrite one template file on disk."""

    def get(self, request, template_path, *args, **kwargs):
        try:
            content = files.read_template(template_path)
        except files.InvalidTemplatePath:
            return _invalid_path_response(template_path)

        if content is None:
            return Response(
                _envelope_response(False, data=None, message="Template not found", error="not_found"),
                status=status.HTTP_404_NOT_FOUND
            )
        return Response(_envelope_response(
            True,
            data={"path": template_path, "content": content},
            message="Template retrieved"
        ))

    def put(self, request, template_path, *args, **kwargs):
        serializer = TemplateFileWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            backup_path = files.write_template(template_path, serializer.validated_data["content"])
        except files.InvalidTemplatePath:
            return _invalid_path_response(template_path)
        except OSError as e:
            logger.error(f"Failed to write template {template_path}: {str(e)}")
            return Response(
                _envelope_response(False, data=None, message="Template write failed", error="write_error"),
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        data = {
            "path": template_path,
            "backup": str(backup_path) if backup_path else None,
        }
        return Response(_envelope_response(True, data=data, message="Template saved"))


class CatalogView(APIView):
    def get(self, request, *args, **kwargs):
        category = request.query_params.get("category")
        if category:
            data = {"category": category, "variables": catalog.describe_variables(category)}
        else:
            data = {
                "app_types": APP_TYPES,
                "categories": catalog.list_categories(),
                "variables": catalog.VARIABLE_DEFINITIONS,
            }
        return Response(_envelope_response(True, data=data, message="Catalog retrieved"))


class VersionListCreateView(APIView):
    def get(self, request, *args, **kwargs):
        template_path = request.query_params.get("path")
        if not template_path:
            return _missing_path_response()

        manager = get_version_manager()
        versions = manager.list_versions(template_path)
        data = {
            "path": template_path,
            "active_version_id": manager.get_active_version(template_path).token,
            "versions": VersionSerializer(versions, many=True).data,
        }
        return Response(_envelope_response(True, data=data, message="Versions retrieved"))

    def post(self, request, *args, **kwargs):
        serializer = CreateVersionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        validated = serializer.validated_data

        version = get_version_manager().create_version(
            validated["path"],
            validated["name"],
            validated["type"],
            validated["content"],
            validated["description"],
        )
        return Response(
            _envelope_response(True, data=VersionSerializer(version).data, message="Version created"),
            status=status.HTTP_201_CREATED
        )


class ActivateVersionView(APIView):
    def post(self, request, *args, **kwargs):
        serializer = ActivateVersionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        template_path = serializer.validated_data["path"]

        manager = get_version_manager()
        manager.set_active_version(template_path, parse_ref(serializer.validated_data["version_id"]))
        data = {
            "path": template_path,
            "active_version_id": manager.get_active_version(template_path).token,
        }
        return Response(_envelope_response(True, data=data, message="Version activated"))


class VersionDetailView(APIView):
    def delete(self, request, version_id, *args, **kwargs):
        template_path = request.query_params.get("path")
        if not template_path:
            return _missing_path_response()

        get_version_manager().delete_version(template_path, version_id)
        return Response(
            _envelope_response(True, data=None, message="Version deleted"),
            status=status.HTTP_204_NO_CONTENT
        )


class VersionContentView(APIView):
    def get(self, request, version_id, *args, **kwargs):
        template_path = request.query_params.get("path")
        if not template_path:
            return _missing_path_response()

        content = get_version_manager().resolve_content(template_path, parse_ref(version_id))
        if content is None:
            return Response(
                _envelope_response(False, data=None, message="Version content not found", error="not_found"),
                status=status.HTTP_404_NOT_FOUND
            )
        data = {"path": template_path, "version_id": version_id, "content": content}
        return Response(_envelope_response(True, data=data, message="Version content retrieved"))


class DiffView(APIView):
    def post(self, request, *args, **kwargs):
        serializer = DiffRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        validated = serializer.validated_data

        manager = get_version_manager()
        texts = {}
        for side in ("old", "new"):
            if f"{side}_text" in validated:
                texts[side] = validated[f"{side}_text"]
                continue
            version_id = validated[f"{side}_version"]
            content = manager.resolve_content(validated["path"], parse_ref(version_id))
            if content is None:
                return Response(
                    _envelope_response(
                        False, data=None,
                        message=f"Could not load {side} version {version_id}",
                        error="not_found"
                    ),
                    status=status.HTTP_404_NOT_FOUND
                )
            texts[side] = content

        entries = diff.compute(texts["old"], texts["new"])
        data = {
            "entries": [entry.to_dict() for entry in entries],
            "rendered": diff.render(entries),
            "summary": diff.summarize(entries),
        }
        return Response(_envelope_response(True, data=data, message="Diff computed"))


class OriginalBackupView(APIView):
    def post(self, request, *args, **kwargs):
        timestamp = get_version_manager().mark_original_backup()
        logger.info(f"Original templates backup recorded at {timestamp}")
        return Response(
            _envelope_response(True, data={"original_backup_timestamp": timestamp}, message="Backup recorded"),
            status=status.HTTP_201_CREATED
        )


class HealthCheckView(APIView):
    authentication_classes = []
    permission_classes = []

    def get(self, request, *args, **kwargs):
        try:
            with connection.cursor() as cursor:
                cursor.execute("SELECT 1;")
                cursor.fetchone()
            db_status = "ok"
        except Exception as e:
            logger.error(f"Health check DB error: {str(e)}")
            db_status = "error"

        is_healthy = db_status == "ok"
        health_status = {
            "service": "template_editor",
            "status": "ok" if is_healthy else "degraded",
            "database": db_status,
            "base_dir": str(config.base_dir()),
        }

        http_status = status.HTTP_200_OK if is_healthy else status.HTTP_503_SERVICE_UNAVAILABLE
        return Response(health_status, status=http_status)
