"""Tests for VersionWriter."""

import pytest

from flutterdeploy.versioning.exceptions import WriteVerificationError
from flutterdeploy.versioning.sources import VersionExtractor, VersionSource
from flutterdeploy.versioning.version import VersionTuple
from flutterdeploy.versioning.writer import VersionWriter

NEW = VersionTuple(1, 3, 0, 7)


@pytest.fixture
def writer():
    return VersionWriter()


@pytest.mark.short
class TestVersionWriter:
    @pytest.mark.parametrize(
        "source",
        [
            VersionSource.MANIFEST,
            VersionSource.ANDROID_DESCRIPTOR,
            VersionSource.IOS_PLIST,
            VersionSource.IOS_PROJECT,
        ],
    )
    def test_write_reads_back(self, full_project, writer, source):
        writer.write(NEW, source, full_project.root)
        result = VersionExtractor().extract(source, full_project.root)
        assert result.parsed == NEW

    def test_manifest_preserves_other_content(self, full_project, writer):
        before = full_project.read("pubspec.yaml")
        writer.write(NEW, VersionSource.MANIFEST, full_project.root)
        after = full_project.read("pubspec.yaml")
        assert after == before.replace("version: 1.2.0+3", "version: 1.3.0+7")

    def test_only_top_level_manifest_version_rewritten(self, project, writer):
        text = "name: app\nversion: 1.0.0+1\ndependencies:\n  foo:\n    version: 1.0.0+1\n"
        (project.root / "pubspec.yaml").write_text(text, encoding="utf-8")
        writer.write(NEW, VersionSource.MANIFEST, project.root)
        assert project.read("pubspec.yaml") == text.replace(
            "version: 1.0.0+1\ndep", "version: 1.3.0+7\ndep"
        )

    def test_manifest_crlf_preserved(self, project, writer):
        path = project.root / "pubspec.yaml"
        path.write_bytes(b"name: app\r\nversion: 1.0.0+1\r\n")
        writer.write(NEW, VersionSource.MANIFEST, project.root)
        assert path.read_bytes() == b"name: app\r\nversion: 1.3.0+7\r\n"

    def test_groovy_descriptor(self, project, writer):
        project.gradle("1.0.0", 1)
        path = writer.write(NEW, VersionSource.ANDROID_DESCRIPTOR, project.root)
        assert path.name == "build.gradle"
        text = project.read("android/app/build.gradle")
        assert 'versionName "1.3.0"' in text
        assert "versionCode 7" in text

    def test_pbxproj_all_configurations(self, full_project, writer):
        writer.write(NEW, VersionSource.IOS_PROJECT, full_project.root)
        text = full_project.read("ios/Runner.xcodeproj/project.pbxproj")
        assert text.count("MARKETING_VERSION = 1.3.0;") == 2
        assert text.count("CURRENT_PROJECT_VERSION = 7;") == 2

    @pytest.mark.parametrize(
        "source, relpath",
        [
            (VersionSource.MANIFEST, "pubspec.yaml"),
            (VersionSource.ANDROID_DESCRIPTOR, "android/app/build.gradle.kts"),
            (VersionSource.IOS_PLIST, "ios/Runner/Info.plist"),
            (VersionSource.IOS_PROJECT, "ios/Runner.xcodeproj/project.pbxproj"),
        ],
    )
    def test_idempotent(self, full_project, writer, source, relpath):
        path = writer.write(NEW, source, full_project.root)
        assert path == full_project.root / relpath
        first = full_project.read(relpath)
        writer.write(NEW, source, full_project.root)
        assert full_project.read(relpath) == first

    def test_missing_file(self, project, writer):
        with pytest.raises(WriteVerificationError, match="not found"):
            writer.write(NEW, VersionSource.MANIFEST, project.root)

    def test_missing_android_descriptor(self, project, writer):
        with pytest.raises(WriteVerificationError):
            writer.write(NEW, VersionSource.ANDROID_DESCRIPTOR, project.root)

    def test_missing_field(self, project, writer):
        (project.root / "pubspec.yaml").write_text("name: app\n", encoding="utf-8")
        with pytest.raises(WriteVerificationError, match="no version declaration"):
            writer.write(NEW, VersionSource.MANIFEST, project.root)
        assert project.read("pubspec.yaml") == "name: app\n"

    def test_store_source_rejected(self, project, writer):
        with pytest.raises(ValueError):
            writer.write(NEW, VersionSource.GOOGLE_PLAY, project.root)
