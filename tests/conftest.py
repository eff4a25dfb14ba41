import io
import logging
from pathlib import Path

import pytest


PUBSPEC = """name: sample_app
description: A sample Flutter app.
publish_to: 'none'

version: {version}

environment:
  sdk: '>=3.0.0 <4.0.0'

dependencies:
  flutter:
    sdk: flutter
"""

BUILD_GRADLE_KTS = """plugins {{
    id("com.android.application")
    id("kotlin-android")
    id("dev.flutter.flutter-gradle-plugin")
}}

android {{
    namespace = "com.acme.sample"
    compileSdk = flutter.compileSdkVersion

    defaultConfig {{
        applicationId = "com.acme.sample"
        minSdk = flutter.minSdkVersion
        targetSdk = flutter.targetSdkVersion
        versionCode = {code}
        versionName = "{name}"
    }}
}}
"""

BUILD_GRADLE = """android {{
    namespace "com.acme.legacy"

    defaultConfig {{
        applicationId "com.acme.legacy"
        minSdkVersion 21
        versionCode {code}
        versionName "{name}"
    }}
}}
"""

INFO_PLIST = """<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE plist PUBLIC "-//Apple//DTD PLIST 1.0//EN" "http://www.apple.com/DTDs/PropertyList-1.0.dtd">
<plist version="1.0">
<dict>
	<key>CFBundleIdentifier</key>
	<string>{bundle_id}</string>
	<key>CFBundleShortVersionString</key>
	<string>{name}</string>
	<key>CFBundleVersion</key>
	<string>{build}</string>
</dict>
</plist>
"""

PBXPROJ = """// !$*UTF8*$!
{{
	objects = {{
		97C147061CF9000F007C117D /* Debug */ = {{
			buildSettings = {{
				CURRENT_PROJECT_VERSION = {build};
				MARKETING_VERSION = {name};
				PRODUCT_BUNDLE_IDENTIFIER = com.acme.sample;
			}};
		}};
		97C147071CF9000F007C117D /* Release */ = {{
			buildSettings = {{
				CURRENT_PROJECT_VERSION = {build};
				MARKETING_VERSION = {name};
				PRODUCT_BUNDLE_IDENTIFIER = com.acme.sample;
			}};
		}};
	}};
}}
"""


class FlutterProject:
    """Writes the version-bearing files of a Flutter project under a root."""

    def __init__(self, root: Path):
        self.root = root

    def _write(self, relpath: str, text: str) -> Path:
        path = self.root / relpath
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    def pubspec(self, version: str = "1.2.0+3") -> Path:
        return self._write("pubspec.yaml", PUBSPEC.format(version=version))

    def gradle_kts(self, name: str = "1.2.0", code="3") -> Path:
        return self._write(
            "android/app/build.gradle.kts", BUILD_GRADLE_KTS.format(name=name, code=code)
        )

    def gradle(self, name: str = "1.2.0", code="3") -> Path:
        return self._write(
            "android/app/build.gradle", BUILD_GRADLE.format(name=name, code=code)
        )

    def flutter_gradle_kts(self) -> Path:
        """Gradle KTS file as generated by `flutter create`, reading the pubspec version."""
        text = BUILD_GRADLE_KTS.format(name="", code="flutter.versionCode")
        return self._write(
            "android/app/build.gradle.kts",
            text.replace('versionName = ""', "versionName = flutter.versionName"),
        )

    def plist(self, name: str = "1.2.0", build="3", bundle_id="com.acme.sample") -> Path:
        return self._write(
            "ios/Runner/Info.plist",
            INFO_PLIST.format(name=name, build=build, bundle_id=bundle_id),
        )

    def pbxproj(self, name: str = "1.2.0", build="3") -> Path:
        return self._write(
            "ios/Runner.xcodeproj/project.pbxproj", PBXPROJ.format(name=name, build=build)
        )

    def config(self, text: str) -> Path:
        return self._write("project.config", text)

    def read(self, relpath: str) -> str:
        return (self.root / relpath).read_text(encoding="utf-8")


@pytest.fixture
def project(tmp_path) -> FlutterProject:
    """An empty Flutter project tree."""
    root = tmp_path / "app"
    root.mkdir()
    return FlutterProject(root)


@pytest.fixture
def full_project(project) -> FlutterProject:
    """A project declaring 1.2.0+3 in pubspec, Gradle KTS, Info.plist and pbxproj."""
    project.pubspec("1.2.0+3")
    project.gradle_kts("1.2.0", 3)
    project.plist("1.2.0", 3)
    project.pbxproj("1.2.0", 3)
    return project


@pytest.fixture(autouse=True)
def isolated_cache(tmp_path, monkeypatch):
    """Keep the advisory store version cache out of the real temp directory."""
    cache_dir = tmp_path / "cache"
    monkeypatch.setattr(
        "flutterdeploy.versioning.cache.get_cache_dir", lambda *args, **kwargs: cache_dir
    )
    return cache_dir


@pytest.fixture
def capture_logs():
    """Fixture to capture log output during tests."""
    log_stream = io.StringIO()
    handler = logging.StreamHandler(log_stream)
    logger = logging.getLogger("flutterdeploy")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)

    yield log_stream

    logger.removeHandler(handler)
    log_stream.close()
