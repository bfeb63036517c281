from pathlib import Path
from unittest import mock
import json
import tempfile

from django.test import TestCase, SimpleTestCase, override_settings
from rest_framework.test import APIClient
from rest_framework import status

from . import catalog, diff, files
from .manifest import ORIGINAL, Manifest, Stored, TemplateEntry, Version, parse_ref
from .models import StoredValue
from .storage import ContentStore, DatabaseKeyValueStore, ManifestStore, MemoryKeyValueStore
from .versions import VersionManager, generate_version_id, get_version_manager

TEXTGEN_DIR = 'Resources/Prompts/Default/en/TextGen'
TEMPLATE_PATH = f'{TEXTGEN_DIR}/ChatInstructSystemMessage.scriban'


def _memory_manager(originals=None):
    """Version manager over an in-memory store; originals maps path -> text."""
    backend = MemoryKeyValueStore()
    originals = originals or {}
    manager = VersionManager(
        ManifestStore(backend, 'test'),
        ContentStore(backend, 'test'),
        originals.get,
    )
    return manager, backend


class TemplateRootMixin:
    """Point the editor at a fresh temporary template root."""

    def setUp(self):
        super().setUp()
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.root = Path(tmp.name).resolve()
        override = override_settings(TEMPLATE_EDITOR={'BASE_DIR': str(self.root)})
        override.enable()
        self.addCleanup(override.disable)

    def write_file(self, relative_path, content):
        target = self.root / relative_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding='utf-8')
        return target


class StoredValueModelTests(TestCase):
    """Test StoredValue model."""

    def test_create_value(self):
        value = StoredValue.objects.create(key="template-editor-state-manifest", value="{}")
        self.assertEqual(str(value), "template-editor-state-manifest")
        self.assertIsNotNone(value.updated_at)

    def test_database_backend(self):
        backend = DatabaseKeyValueStore()
        self.assertIsNone(backend.get("k"))

        backend.set("k", "one")
        backend.set("k", "two")
        self.assertEqual(backend.get("k"), "two")
        self.assertEqual(StoredValue.objects.filter(key="k").count(), 1)

        backend.delete("k")
        backend.delete("k")
        self.assertIsNone(backend.get("k"))


class ManifestStoreTests(SimpleTestCase):

    def setUp(self):
        self.backend = MemoryKeyValueStore()
        self.store = ManifestStore(self.backend, 'test')

    def test_load_missing_returns_empty_manifest(self):
        manifest = self.store.load()
        self.assertEqual(manifest.templates, {})
        self.assertIsNone(manifest.original_backup_timestamp)

    def test_load_corrupted_manifest_is_logged_and_replaced(self):
        self.backend.set('test-manifest', '{not json')
        with self.assertLogs('template_editor.storage', level='ERROR'):
            manifest = self.store.load()
        self.assertEqual(manifest.to_dict(), Manifest().to_dict())

    def test_load_wrong_shape_is_treated_as_missing(self):
        self.backend.set('test-manifest', json.dumps(["not", "an", "object"]))
        with self.assertLogs('template_editor.storage', level='ERROR'):
            manifest = self.store.load()
        self.assertEqual(manifest.templates, {})

    def test_save_then_load(self):
        version = Version(id='v1', name='First', type='Companion', created_at='2024-01-01T00:00:00+00:00')
        manifest = Manifest(
            templates={'T': TemplateEntry(active=version.ref, versions=[version])},
            original_backup_timestamp='2024-01-02T00:00:00+00:00',
        )
        self.store.save(manifest)

        loaded = self.store.load()
        self.assertEqual(loaded.templates['T'].active, Stored('v1'))
        self.assertEqual(loaded.templates['T'].versions, [version])
        self.assertEqual(loaded.original_backup_timestamp, '2024-01-02T00:00:00+00:00')

    def test_persisted_layout(self):
        version = Version(id='v1', name='First', type='Assistant', created_at='now', description='d')
        self.store.save(Manifest(templates={'T': TemplateEntry(versions=[version])}))

        data = json.loads(self.backend.get('test-manifest'))
        self.assertEqual(data['originalBackupTimestamp'], None)
        self.assertEqual(data['templates']['T']['activeVersionId'], 'original')
        self.assertEqual(data['templates']['T']['versions'][0], {
            'id': 'v1',
            'name': 'First',
            'type': 'Assistant',
            'createdAt': 'now',
            'description': 'd',
            'isOriginal': False,
        })


class ContentStoreTests(SimpleTestCase):

    def setUp(self):
        self.backend = MemoryKeyValueStore()
        self.store = ContentStore(self.backend, 'test')

    def test_get_missing(self):
        self.assertIsNone(self.store.get('T', 'v1'))

    def test_put_get_delete(self):
        self.store.put('T', 'v1', '')
        self.assertEqual(self.store.get('T', 'v1'), '')
        self.assertEqual(self.backend.get('test-content-T-v1'), '')

        self.store.delete('T', 'v1')
        self.assertIsNone(self.store.get('T', 'v1'))

    def test_delete_missing_is_noop(self):
        self.store.delete('T', 'nope')
        self.assertIsNone(self.store.get('T', 'nope'))


class VersionRefTests(SimpleTestCase):

    def test_parse_ref(self):
        self.assertEqual(parse_ref('original'), ORIGINAL)
        self.assertEqual(parse_ref('v123'), Stored('v123'))
        self.assertEqual(ORIGINAL.token, 'original')
        self.assertEqual(Stored('v123').token, 'v123')


class VersionManagerTests(SimpleTestCase):

    def setUp(self):
        self.manager, self.backend = _memory_manager({'T': 'original text'})

    def assertActiveConsistent(self, path):
        active = self.manager.get_active_version(path)
        ids = [v.id for v in self.manager.list_versions(path)]
        self.assertTrue(active == ORIGINAL or active.token in ids)

    def test_unknown_path_defaults(self):
        self.assertEqual(self.manager.get_active_version('unknown-path'), ORIGINAL)
        self.assertEqual(self.manager.list_versions('unknown-path'), [])

    def test_create_version(self):
        version = self.manager.create_version('T', 'v1', 'Companion', 'hello', 'first try')
        self.assertTrue(version.id.startswith('v'))
        self.assertEqual(version.name, 'v1')
        self.assertEqual(version.type, 'Companion')
        self.assertEqual(version.description, 'first try')
        self.assertFalse(version.is_original)
        self.assertEqual(self.manager.list_versions('T'), [version])

    def test_create_does_not_activate(self):
        self.manager.create_version('T', 'v1', 'Companion', 'hello', '')
        self.assertEqual(self.manager.get_active_version('T'), ORIGINAL)

    def test_versions_keep_creation_order(self):
        names = ['a', 'b', 'c']
        for name in names:
            self.manager.create_version('T', name, 'Assistant', name, '')
        self.assertEqual([v.name for v in self.manager.list_versions('T')], names)

    def test_create_then_resolve_then_delete(self):
        version = self.manager.create_version('T', 'v1', 'Roleplay', 'line one\nline two', '')
        self.assertEqual(self.manager.resolve_content('T', version.ref), 'line one\nline two')

        self.manager.delete_version('T', version.id)
        self.assertIsNone(self.manager.resolve_content('T', version.ref))
        self.assertEqual(self.manager.list_versions('T'), [])

    def test_delete_active_resets_to_original(self):
        version = self.manager.create_version('T', 'v1', 'Companion', 'hello', '')
        self.manager.set_active_version('T', version.ref)
        self.assertEqual(self.manager.get_active_version('T'), Stored(version.id))

        self.manager.delete_version('T', version.id)
        self.assertEqual(self.manager.get_active_version('T'), ORIGINAL)
        self.assertEqual(self.manager.list_versions('T'), [])

    def test_delete_inactive_keeps_active(self):
        keep = self.manager.create_version('T', 'keep', 'Companion', 'a', '')
        drop = self.manager.create_version('T', 'drop', 'Companion', 'b', '')
        self.manager.set_active_version('T', keep.ref)

        self.manager.delete_version('T', drop.id)
        self.assertEqual(self.manager.get_active_version('T'), keep.ref)
        self.assertEqual(self.manager.list_versions('T'), [keep])

    def test_delete_unknown_is_noop(self):
        version = self.manager.create_version('T', 'v1', 'Companion', 'hello', '')
        self.manager.delete_version('T', 'missing')
        self.manager.delete_version('unknown-path', version.id)
        self.assertEqual(self.manager.list_versions('T'), [version])
        self.assertEqual(self.manager.resolve_content('T', version.ref), 'hello')

    def test_delete_unknown_id_keeps_other_template_content(self):
        # "a" + "b-<id>" maps to the same content key as "a-b" + "<id>"
        kept = self.manager.create_version('a-b', 'kept', 'Companion', 'keep me', '')
        self.manager.create_version('a', 'other', 'Companion', 'other', '')

        self.manager.delete_version('a', f'b-{kept.id}')
        self.assertEqual(self.manager.list_versions('a-b'), [kept])
        self.assertEqual(self.manager.resolve_content('a-b', kept.ref), 'keep me')
        self.assertEqual(len(self.manager.list_versions('a')), 1)

    def test_set_active_unknown_path_is_noop(self):
        self.manager.set_active_version('unknown-path', Stored('v1'))
        self.assertEqual(self.manager.get_active_version('unknown-path'), ORIGINAL)
        self.assertNotIn('unknown-path', self.manager.manifests.load().templates)

    def test_set_active_unchecked_id_resolves_to_nothing(self):
        self.manager.create_version('T', 'v1', 'Companion', 'hello', '')
        self.manager.set_active_version('T', Stored('bogus'))
        active = self.manager.get_active_version('T')
        self.assertEqual(active, Stored('bogus'))
        self.assertIsNone(self.manager.resolve_content('T', active))

    def test_resolve_original_uses_file_collaborator(self):
        self.assertEqual(self.manager.resolve_content('T', ORIGINAL), 'original text')
        self.assertIsNone(self.manager.resolve_content('missing', ORIGINAL))

    def test_active_version_stays_consistent(self):
        first = self.manager.create_version('T', 'one', 'Companion', '1', '')
        self.assertActiveConsistent('T')
        second = self.manager.create_version('T', 'two', 'Companion', '2', '')
        self.manager.set_active_version('T', second.ref)
        self.assertActiveConsistent('T')
        self.manager.delete_version('T', first.id)
        self.assertActiveConsistent('T')
        self.manager.set_active_version('T', ORIGINAL)
        self.assertActiveConsistent('T')
        self.manager.set_active_version('T', second.ref)
        self.manager.delete_version('T', second.id)
        self.assertActiveConsistent('T')
        self.assertEqual(self.manager.get_active_version('T'), ORIGINAL)

    def test_ids_unique_within_same_millisecond(self):
        with mock.patch('template_editor.versions.time.time', return_value=1700000000.123):
            versions = [
                self.manager.create_version('T', f'n{i}', 'Companion', str(i), '')
                for i in range(50)
            ]
        ids = [v.id for v in self.manager.list_versions('T')]
        self.assertEqual(len(ids), 50)
        self.assertEqual(len(set(ids)), 50)
        self.assertEqual(len({v.id[:9] for v in versions}), 1)

    def test_generate_version_id_format(self):
        version_id = generate_version_id()
        self.assertTrue(version_id.startswith('v'))
        self.assertTrue(version_id[1:].isalnum())
        self.assertEqual(version_id, version_id.lower())

    def test_mark_original_backup(self):
        self.assertIsNone(self.manager.manifests.load().original_backup_timestamp)
        timestamp = self.manager.mark_original_backup()
        self.assertEqual(self.manager.manifests.load().original_backup_timestamp, timestamp)

    def test_corrupted_manifest_starts_fresh(self):
        self.backend.set('test-manifest', 'garbage')
        with self.assertLogs('template_editor.storage', level='ERROR'):
            self.assertEqual(self.manager.list_versions('T'), [])


class DatabaseVersionManagerTests(TestCase):

    def test_default_manager_persists_in_database(self):
        version = get_version_manager().create_version('T', 'v1', 'Companion', 'hello', '')

        # A fresh manager sees the same state
        manager = get_version_manager()
        self.assertEqual([v.id for v in manager.list_versions('T')], [version.id])
        self.assertEqual(manager.resolve_content('T', version.ref), 'hello')
        self.assertTrue(StoredValue.objects.filter(key='template-editor-state-manifest').exists())
        self.assertTrue(
            StoredValue.objects.filter(key=f'template-editor-state-content-T-{version.id}').exists()
        )

    @override_settings(TEMPLATE_EDITOR={'STORAGE_KEY': 'other'})
    def test_storage_key_from_settings(self):
        get_version_manager().create_version('T', 'v1', 'Companion', 'hello', '')
        self.assertTrue(StoredValue.objects.filter(key='other-manifest').exists())


class DiffEngineTests(SimpleTestCase):

    def assertCovers(self, old, new):
        entries = diff.compute(old, new)
        self.assertEqual([e.line for e in entries if e.kind != diff.ADDED], old.split('\n'))
        self.assertEqual([e.line for e in entries if e.kind != diff.REMOVED], new.split('\n'))

    def kinds(self, entries):
        return [(e.kind, e.line) for e in entries]

    def test_changed_middle_line(self):
        entries = diff.compute("a\nb\nc", "a\nx\nc")
        self.assertEqual(self.kinds(entries), [
            ('unchanged', 'a'),
            ('removed', 'b'),
            ('added', 'x'),
            ('unchanged', 'c'),
        ])

    def test_identical_texts(self):
        text = "first\n\n{{ char }}\nlast"
        entries = diff.compute(text, text)
        self.assertTrue(all(e.kind == diff.UNCHANGED for e in entries))
        self.assertEqual([e.line for e in entries], text.split('\n'))

    def test_inserted_lines(self):
        entries = diff.compute("a\nb", "x\ny\na\nb")
        self.assertEqual(self.kinds(entries), [
            ('added', 'x'),
            ('added', 'y'),
            ('unchanged', 'a'),
            ('unchanged', 'b'),
        ])

    def test_removed_lines(self):
        entries = diff.compute("x\na\nb", "a\nb")
        self.assertEqual(self.kinds(entries), [
            ('removed', 'x'),
            ('unchanged', 'a'),
            ('unchanged', 'b'),
        ])

    def test_trailing_changes(self):
        self.assertEqual(self.kinds(diff.compute("a", "a\nb\nc")), [
            ('unchanged', 'a'), ('added', 'b'), ('added', 'c'),
        ])
        self.assertEqual(self.kinds(diff.compute("a\nb\nc", "a")), [
            ('unchanged', 'a'), ('removed', 'b'), ('removed', 'c'),
        ])

    def test_equal_distance_prefers_removal(self):
        entries = diff.compute("a\nb", "b\na")
        self.assertEqual(self.kinds(entries), [
            ('removed', 'a'),
            ('unchanged', 'b'),
            ('added', 'a'),
        ])

    def test_closer_match_wins(self):
        # "a" reappears one line later in new, "x" three lines later in old
        entries = diff.compute("a\nq\nr\nx", "x\na\nq\nr")
        self.assertEqual(entries[0], diff.DiffLine(diff.ADDED, 'x'))
        self.assertCovers("a\nq\nr\nx", "x\na\nq\nr")

    def test_coverage(self):
        cases = [
            ("", ""),
            ("", "a\nb"),
            ("a\nb", ""),
            ("a\nb\nc\nd", "d\nc\nb\na"),
            ("x\ny\nx\ny", "y\nx\ny\nx\nz"),
            ("{{ char }}\nHello\n{{ user }}", "Hello\n{{ user }}\n{{ char }}\nBye"),
        ]
        for old, new in cases:
            with self.subTest(old=old, new=new):
                self.assertCovers(old, new)

    def test_render(self):
        entries = diff.compute("a\nb\nc", "a\nx\nc")
        self.assertEqual(diff.render(entries), "  a\n- b\n+ x\n  c")
        self.assertEqual(diff.render([]), "")

    def test_summarize(self):
        entries = diff.compute("a\nb\nc", "a\nx\nc\nd")
        self.assertEqual(diff.summarize(entries), {'added': 2, 'removed': 1, 'unchanged': 2})


class TemplateFileTests(TemplateRootMixin, SimpleTestCase):

    def test_list_templates(self):
        self.write_file(TEMPLATE_PATH, 'system')
        self.write_file(f'{TEXTGEN_DIR}/Includes/Intro.scriban', 'intro')
        self.write_file(f'{TEXTGEN_DIR}/notes.txt', 'ignored')
        self.write_file('Resources/Formatting/Default.scriban', 'format')
        self.write_file('Elsewhere/Other.scriban', 'not scanned')

        templates = files.list_templates()
        self.assertEqual(templates, [
            TEMPLATE_PATH,
            f'{TEXTGEN_DIR}/Includes/Intro.scriban',
            'Resources/Formatting/Default.scriban',
        ])

    def test_list_templates_missing_directories(self):
        with self.assertLogs('template_editor.files', level='WARNING'):
            self.assertEqual(files.list_templates(), [])

    def test_read_template(self):
        self.write_file(TEMPLATE_PATH, 'Hello {{ user }}')
        self.assertEqual(files.read_template(TEMPLATE_PATH), 'Hello {{ user }}')
        self.assertIsNone(files.read_template('Resources/missing.scriban'))

    def test_path_outside_root_rejected(self):
        with self.assertRaises(files.InvalidTemplatePath):
            files.read_template('../outside.scriban')
        with self.assertRaises(files.InvalidTemplatePath):
            files.write_template('../../outside.scriban', 'x')
        with self.assertRaises(files.InvalidTemplatePath):
            files.write_template('', 'x')

    def test_write_new_file_has_no_backup(self):
        backup = files.write_template(TEMPLATE_PATH, 'new content')
        self.assertIsNone(backup)
        self.assertEqual((self.root / TEMPLATE_PATH).read_text(encoding='utf-8'), 'new content')

    def test_write_existing_file_creates_backup(self):
        self.write_file(TEMPLATE_PATH, 'before')
        backup = files.write_template(TEMPLATE_PATH, 'after')

        self.assertEqual(backup.parent, self.root / 'Data/TemplateBackups')
        self.assertTrue(backup.name.startswith(TEMPLATE_PATH.replace('/', '_') + '.'))
        self.assertTrue(backup.name.endswith('.bak'))
        self.assertEqual(backup.read_text(encoding='utf-8'), 'before')
        self.assertEqual((self.root / TEMPLATE_PATH).read_text(encoding='utf-8'), 'after')

    def test_fetch_original_never_raises(self):
        self.write_file(TEMPLATE_PATH, 'content')
        self.assertEqual(files.fetch_original(TEMPLATE_PATH), 'content')
        self.assertIsNone(files.fetch_original('Resources/missing.scriban'))
        with self.assertLogs('template_editor.files', level='WARNING'):
            self.assertIsNone(files.fetch_original('../etc/passwd'))
        with self.assertLogs('template_editor.files', level='WARNING'):
            self.assertIsNone(files.fetch_original('a\x00b.scriban'))

    def test_nul_byte_path_rejected(self):
        with self.assertRaises(files.InvalidTemplatePath):
            files.read_template('a\x00b.scriban')
        with self.assertRaises(files.InvalidTemplatePath):
            files.write_template('a\x00b.scriban', 'x')

    def test_write_to_disk(self):
        self.assertTrue(files.write_to_disk(TEMPLATE_PATH, 'saved'))
        self.assertEqual(files.read_template(TEMPLATE_PATH), 'saved')
        with self.assertLogs('template_editor.files', level='WARNING'):
            self.assertFalse(files.write_to_disk('../outside.scriban', 'x'))


class CatalogTests(SimpleTestCase):

    def test_list_categories(self):
        categories = {c['category']: c for c in catalog.list_categories()}
        self.assertEqual(categories['TextGen']['base_path'], 'Resources/Prompts/Default/en/TextGen')
        self.assertEqual(categories['ChainOfThought']['base_path'], 'Resources/Modules/ChainOfThought/en')
        self.assertTrue(categories['ChainOfThought']['is_module'])
        self.assertFalse(categories['TextGen']['is_module'])

    def test_category_for_path(self):
        self.assertEqual(catalog.category_for_path(TEMPLATE_PATH), 'TextGen')
        self.assertEqual(
            catalog.category_for_path(f'{TEXTGEN_DIR}/Includes/Intro.scriban'),
            'TextGen/Includes'
        )
        self.assertIsNone(catalog.category_for_path('Resources/Formatting/Default.scriban'))

    def test_describe_variables(self):
        groups = catalog.describe_variables('Continuations')
        self.assertEqual([g['group'] for g in groups], ['Identity', 'Other'])
        self.assertEqual(groups[1]['variables'], [
            {'name': 'maybe', 'type': 'boolean', 'description': 'Flag to include optional phrases'},
            {'name': 'x', 'type': 'integer', 'description': 'Internal random counter'},
        ])
        self.assertEqual(catalog.describe_variables('Nope'), [])

    def test_every_category_variable_is_documented(self):
        for name, category in catalog.TEMPLATE_CATEGORIES.items():
            for variable in category['variables']:
                with self.subTest(category=name, variable=variable):
                    self.assertIn(variable, catalog.VARIABLE_DEFINITIONS)


class TemplateFileAPITests(TemplateRootMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.client = APIClient()

    def test_list_files(self):
        untouched = f'{TEXTGEN_DIR}/PostHistorySystemMessage.scriban'
        self.write_file(TEMPLATE_PATH, 'system')
        self.write_file(untouched, 'post history')
        get_version_manager().create_version(TEMPLATE_PATH, 'v1', 'Companion', 'x', '')

        response = self.client.get('/api/v1/files/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()
        self.assertTrue(data['success'])
        self.assertEqual(data['meta']['total'], 2)
        self.assertEqual(data['data'], [
            {'path': TEMPLATE_PATH, 'category': 'TextGen', 'modified': True},
            {'path': untouched, 'category': 'TextGen', 'modified': False},
        ])

    def test_list_files_loads_manifest_once(self):
        self.write_file(TEMPLATE_PATH, 'system')
        self.write_file(f'{TEXTGEN_DIR}/PostHistorySystemMessage.scriban', 'post history')
        self.write_file('Resources/Formatting/Default.scriban', 'format')

        with mock.patch.object(ManifestStore, 'load', autospec=True, return_value=Manifest()) as load:
            response = self.client.get('/api/v1/files/')
        self.assertEqual(response.json()['meta']['total'], 3)
        self.assertEqual(load.call_count, 1)

    def test_read_file(self):
        self.write_file(TEMPLATE_PATH, 'Hello {{ char }}')
        response = self.client.get(f'/api/v1/files/{TEMPLATE_PATH}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['data']['content'], 'Hello {{ char }}')

    def test_read_missing_file(self):
        response = self.client.get('/api/v1/files/Resources/missing.scriban')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.json()['error'], 'not_found')

    def test_write_file(self):
        self.write_file(TEMPLATE_PATH, 'old')
        response = self.client.put(f'/api/v1/files/{TEMPLATE_PATH}', {'content': 'new'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()
        self.assertTrue(data['success'])
        self.assertIsNotNone(data['data']['backup'])
        self.assertEqual(files.read_template(TEMPLATE_PATH), 'new')

    def test_write_file_missing_content(self):
        response = self.client.put(f'/api/v1/files/{TEMPLATE_PATH}', {'content': ''}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.put(f'/api/v1/files/{TEMPLATE_PATH}', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse((self.root / TEMPLATE_PATH).exists())

    def test_write_file_failure_returns_envelope(self):
        (self.root / TEMPLATE_PATH).mkdir(parents=True)
        with self.assertLogs('template_editor.views', level='ERROR'):
            response = self.client.put(f'/api/v1/files/{TEMPLATE_PATH}', {'content': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        data = response.json()
        self.assertFalse(data['success'])
        self.assertEqual(data['error'], 'write_error')


class VersionAPITests(TemplateRootMixin, TestCase):
    """Test version history endpoints."""

    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.list_url = '/api/v1/versions/'
        self.write_file(TEMPLATE_PATH, 'line one\nline two')

    def create(self, name='v1', content='line one\nline 2', **extra):
        payload = {'path': TEMPLATE_PATH, 'name': name, 'type': 'Companion', 'content': content}
        payload.update(extra)
        return self.client.post(self.list_url, payload, format='json')

    def test_list_versions_unknown_path(self):
        response = self.client.get(self.list_url, {'path': 'unknown-path'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()['data']
        self.assertEqual(data['active_version_id'], 'original')
        self.assertEqual(data['versions'], [])

    def test_list_versions_requires_path(self):
        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()['error'], 'missing_path')

    def test_create_version(self):
        response = self.create(description='tweaked wording')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        version = response.json()['data']
        self.assertEqual(version['name'], 'v1')
        self.assertEqual(version['type'], 'Companion')
        self.assertEqual(version['description'], 'tweaked wording')
        self.assertFalse(version['is_original'])

        listing = self.client.get(self.list_url, {'path': TEMPLATE_PATH}).json()['data']
        self.assertEqual(listing['active_version_id'], 'original')
        self.assertEqual([v['id'] for v in listing['versions']], [version['id']])

    def test_create_version_validation(self):
        self.assertEqual(self.create(name='').status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.create(name='   ').status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.create(type='Villain').status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(get_version_manager().list_versions(TEMPLATE_PATH), [])

    def test_activate_and_delete(self):
        version_id = self.create().json()['data']['id']

        response = self.client.post(
            '/api/v1/versions/activate/',
            {'path': TEMPLATE_PATH, 'version_id': version_id},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['data']['active_version_id'], version_id)

        response = self.client.delete(f'/api/v1/versions/{version_id}/?path={TEMPLATE_PATH}')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

        listing = self.client.get(self.list_url, {'path': TEMPLATE_PATH}).json()['data']
        self.assertEqual(listing['active_version_id'], 'original')
        self.assertEqual(listing['versions'], [])

    def test_activate_original(self):
        version_id = self.create().json()['data']['id']
        self.client.post('/api/v1/versions/activate/', {'path': TEMPLATE_PATH, 'version_id': version_id}, format='json')
        response = self.client.post(
            '/api/v1/versions/activate/',
            {'path': TEMPLATE_PATH, 'version_id': 'original'},
            format='json'
        )
        self.assertEqual(response.json()['data']['active_version_id'], 'original')

    def test_version_content(self):
        version_id = self.create(content='changed').json()['data']['id']

        response = self.client.get(f'/api/v1/versions/{version_id}/content/', {'path': TEMPLATE_PATH})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['data']['content'], 'changed')

        response = self.client.get('/api/v1/versions/original/content/', {'path': TEMPLATE_PATH})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['data']['content'], 'line one\nline two')

    def test_version_content_not_found(self):
        response = self.client.get('/api/v1/versions/vmissing/content/', {'path': TEMPLATE_PATH})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        response = self.client.get('/api/v1/versions/original/content/', {'path': 'Resources/missing.scriban'})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        with self.assertLogs('template_editor.files', level='WARNING'):
            response = self.client.get('/api/v1/versions/original/content/', {'path': 'a\x00b.scriban'})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_original_backup(self):
        response = self.client.post('/api/v1/backups/originals/')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        timestamp = response.json()['data']['original_backup_timestamp']
        manifest = get_version_manager().manifests.load()
        self.assertEqual(manifest.original_backup_timestamp, timestamp)


class DiffAPITests(TemplateRootMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.url = '/api/v1/diff/'

    def test_diff_texts(self):
        response = self.client.post(self.url, {'old_text': 'a\nb\nc', 'new_text': 'a\nx\nc'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()['data']
        self.assertEqual(data['entries'][1], {'kind': 'removed', 'line': 'b'})
        self.assertEqual(data['rendered'], '  a\n- b\n+ x\n  c')
        self.assertEqual(data['summary'], {'added': 1, 'removed': 1, 'unchanged': 2})

    def test_diff_original_against_edit(self):
        self.write_file(TEMPLATE_PATH, 'a\nb')
        response = self.client.post(self.url, {
            'path': TEMPLATE_PATH,
            'old_version': 'original',
            'new_text': 'a\nb\nc',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['data']['summary']['added'], 1)

    def test_diff_between_versions(self):
        manager = get_version_manager()
        first = manager.create_version(TEMPLATE_PATH, 'one', 'Companion', 'a\nb', '')
        second = manager.create_version(TEMPLATE_PATH, 'two', 'Companion', 'b', '')
        response = self.client.post(self.url, {
            'path': TEMPLATE_PATH,
            'old_version': first.id,
            'new_version': second.id,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['data']['rendered'], '- a\n  b')

    def test_diff_missing_version(self):
        response = self.client.post(self.url, {
            'path': TEMPLATE_PATH,
            'old_version': 'original',
            'new_text': 'x',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_diff_validation(self):
        response = self.client.post(self.url, {'old_text': 'a'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post(self.url, {'old_text': 'a', 'new_version': 'v1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post(self.url, {'old_text': 'a', 'new_text': 'b', 'new_version': 'v1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class CatalogAPITests(TestCase):

    def test_catalog(self):
        response = APIClient().get('/api/v1/catalog/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()['data']
        self.assertEqual(data['app_types'], ['Companion', 'Assistant', 'Roleplay', 'Storytelling'])
        self.assertIn('char', data['variables'])
        self.assertEqual(len(data['categories']), len(catalog.TEMPLATE_CATEGORIES))

    def test_catalog_for_category(self):
        response = APIClient().get('/api/v1/catalog/', {'category': 'Includes'})
        data = response.json()['data']
        self.assertEqual(data['category'], 'Includes')
        self.assertEqual(data['variables'][0]['group'], 'Identity')


class HealthCheckTests(TestCase):
    """Test Health Check endpoint."""

    def setUp(self):
        self.client = APIClient()
        self.health_url = '/health/'

    def test_health_check_success(self):
        response = self.client.get(self.health_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()
        self.assertEqual(data['service'], 'template_editor')
        self.assertEqual(data['status'], 'ok')
        self.assertEqual(data['database'], 'ok')
        self.assertIn('base_dir', data)
