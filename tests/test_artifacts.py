"""Tests for artifact storage, naming, user-agent parsing and SaveScreenshot."""

import base64
import re
from pathlib import Path
from unittest.mock import patch

import pytest

from src.compare.save_screenshot import SaveScreenshot
from src.errors import ConfigurationError, StorageError
from src.models.screenshot import ScreenshotMeta
from src.naming import make_name_function, screenshot_filename, slugify
from src.storage.artifact_store import ArtifactStore
from src.user_agent import parse_user_agent


class TestArtifactStore:
    """Tests for filesystem artifact access."""

    def test_write_creates_parents_and_overwrites(self, tmp_path):
        store = ArtifactStore()
        path = tmp_path / "a" / "b" / "img.png"
        store.write_file(path, b"one")
        store.write_file(path, b"two")
        assert path.read_bytes() == b"two"
        assert store.exists(path)

    def test_write_base64(self, tmp_path):
        store = ArtifactStore()
        path = store.write_base64(tmp_path / "img.png", base64.b64encode(b"\x89PNG").decode())
        assert path.read_bytes() == b"\x89PNG"

    def test_write_base64_rejects_garbage(self, tmp_path):
        with pytest.raises(StorageError):
            ArtifactStore().write_base64(tmp_path / "img.png", "%%%")

    def test_remove_missing_file_is_not_an_error(self, tmp_path):
        assert ArtifactStore().remove_file(tmp_path / "missing.png") is False

    def test_remove_existing_file(self, tmp_path):
        path = tmp_path / "diff.png"
        path.write_bytes(b"x")
        assert ArtifactStore().remove_file(path) is True
        assert not path.exists()

    def test_write_failure_raises_storage_error(self, tmp_path):
        with patch.object(Path, "write_bytes", side_effect=PermissionError("read-only")):
            with pytest.raises(StorageError, match="read-only"):
                ArtifactStore().write_file(tmp_path / "img.png", b"x")

    def test_read_missing_raises_storage_error(self, tmp_path):
        with pytest.raises(StorageError):
            ArtifactStore().read_file(tmp_path / "missing.png")

    def test_directory_is_not_an_artifact(self, tmp_path):
        assert ArtifactStore().exists(tmp_path) is False


class TestNaming:
    """Tests for the default naming scheme."""

    def test_slugify(self):
        assert slugify("renders the header!") == "renders_the_header"
        assert slugify("#nav > a.active") == "nav_a.active"

    def test_filename_includes_identity(self, context):
        assert re.fullmatch(
            r"home_renders_header_document_Chrome122\.0_600x1000_[0-9a-f]{10}\.png",
            screenshot_filename(context),
        )

    def test_filename_is_stable(self, context, context_factory):
        assert screenshot_filename(context) == screenshot_filename(context_factory())

    def test_element_selector_in_name(self, context_factory):
        context = context_factory(
            type="element",
            meta=ScreenshotMeta(element="#logo", orientation="landscape"),
        )
        assert screenshot_filename(context).startswith("home_renders_header_element_logo_Chrome122.0_landscape_")

    def test_distinct_resolutions_get_distinct_names(self, context_factory):
        a = context_factory(meta=ScreenshotMeta(orientation="portrait"))
        b = context_factory(meta=ScreenshotMeta(orientation="landscape"))
        assert screenshot_filename(a) != screenshot_filename(b)

    def test_selectors_sharing_a_slug_get_distinct_names(self, context_factory):
        hashed = context_factory(type="element", meta=ScreenshotMeta(element="#nav", orientation="portrait"))
        bare = context_factory(type="element", meta=ScreenshotMeta(element="nav", orientation="portrait"))
        assert slugify("#nav") == slugify("nav")
        assert screenshot_filename(hashed) != screenshot_filename(bare)

    def test_suite_and_test_boundary_is_kept(self, context_factory):
        a = context_factory(suite="a b", test="c")
        b = context_factory(suite="a", test="b c")
        assert screenshot_filename(a) != screenshot_filename(b)

    def test_name_function_uses_base_dir(self, tmp_path, context):
        name = make_name_function(tmp_path / "ref")
        assert name(context).parent == tmp_path / "ref"


class TestUserAgent:
    """Tests for browser identification."""

    @pytest.mark.parametrize("ua,name,version", [
        ("Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) "
         "Chrome/122.0.6261.94 Safari/537.36", "Chrome", "122.0"),
        ("Mozilla/5.0 (X11; Linux x86_64; rv:123.0) Gecko/20100101 Firefox/123.0", "Firefox", "123.0"),
        ("Mozilla/5.0 (Macintosh; Intel Mac OS X 14_3) AppleWebKit/605.1.15 "
         "(KHTML, like Gecko) Version/17.3 Safari/605.1.15", "Safari", "17.3"),
        ("Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
         "Chrome/122.0.0.0 Safari/537.36 Edg/122.0.2365.66", "Edge", "122.0"),
    ])
    def test_known_browsers(self, ua, name, version):
        info = parse_user_agent(ua)
        assert (info.name, info.version, info.user_agent) == (name, version, ua)

    def test_unknown_agent(self):
        info = parse_user_agent("curl/8.0")
        assert info.name == ""
        assert info.user_agent == "curl/8.0"


class TestSaveScreenshot:
    """Tests for the reference-refreshing strategy."""

    def test_requires_name_function(self):
        with pytest.raises(ConfigurationError):
            SaveScreenshot(None)

    @pytest.mark.asyncio
    async def test_overwrites_every_run(self, tmp_path, context, png_factory, b64):
        strategy = SaveScreenshot(make_name_function(tmp_path))

        first = await strategy.process_screenshot(context, b64(png_factory()))
        second_png = png_factory(color=(0, 0, 0, 255))
        second = await strategy.process_screenshot(context, b64(second_png))

        assert first.reference_existed is False
        assert second.reference_existed is True
        assert second.passed
        assert (tmp_path / screenshot_filename(context)).read_bytes() == second_png
