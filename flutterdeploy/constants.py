# Project layout, relative to the Flutter project root
PUBSPEC_FILE = "pubspec.yaml"
ANDROID_BUILD_GRADLE_KTS = "android/app/build.gradle.kts"
ANDROID_BUILD_GRADLE = "android/app/build.gradle"
ANDROID_MANIFEST = "android/app/src/main/AndroidManifest.xml"
IOS_INFO_PLIST = "ios/Runner/Info.plist"
IOS_PBXPROJ = "ios/Runner.xcodeproj/project.pbxproj"
PROJECT_CONFIG_FILE = "project.config"

# Stores
GOOGLE_PLAY_URL = "https://play.google.com/store/apps/details"
APP_STORE_LOOKUP_URL = "https://itunes.apple.com/lookup"
STORE_REQUEST_TIMEOUT = 10
STORE_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)

# Stores do not expose a build counter
SYNTHETIC_STORE_BUILD = 1
DEFAULT_BUILD_NUMBER = 1

# Advisory store version cache
STORE_CACHE_FILE = "store_version.txt"
GOOGLE_PLAY_CACHE_FILE = "google_play_version.txt"
APP_STORE_CACHE_FILE = "app_store_version.txt"

LIVE_TAG_PREFIX = "live"
