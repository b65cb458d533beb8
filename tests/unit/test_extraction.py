"""Unit tests for code extraction."""

import pytest

from mockforge.models.generation import ExtractedFile
from mockforge.services.extraction import CodeExtractor, looks_like_project
from mockforge.services.extraction.strategies import (
    ContentSignature,
    ExtractionStrategy,
    LooseBlockStrategy,
    MarkerDelimitedStrategy,
    SignatureStrategy,
    fenced_blocks,
    normalize_path,
)

FENCE = "```"


def fenced(content, language="dart"):
    return f"{FENCE}{language}\n{content}\n{FENCE}"


MAIN_DART = """import 'package:flutter/material.dart';

void main() {
  runApp(const MyApp());
}"""

PUBSPEC = """name: demo_app
description: Demo
environment:
  sdk: '>=3.3.0 <4.0.0'
flutter:
  uses-material-design: true"""


class RecordingStrategy(ExtractionStrategy):
    """Strategy double recording whether it ran."""

    def __init__(self, files=None, error=None):
        self.calls = 0
        self.files = files or []
        self.error = error

    @property
    def name(self):
        return "recording"

    def extract(self, text):
        self.calls += 1
        if self.error:
            raise self.error
        return list(self.files)


class TestCodeExtractor:
    """Tests for the extraction cascade."""

    def test_reply_without_markers_or_fences(self):
        """Test a plain prose reply yields an empty map."""
        reply = "Sure! I would build a Flutter app with a login screen and a dashboard. Let me know."
        assert CodeExtractor().extract_files(reply) == {}

    @pytest.mark.parametrize("reply", [None, "", "   \n"])
    def test_empty_reply(self, reply):
        assert CodeExtractor().extract_files(reply) == {}

    def test_marker_strategy_wins_and_signature_never_runs(self):
        """Test the cascade stops at the first strategy with files.

        Verifies that a reply holding both a marker-delimited file and a
        signature-matchable scaffold block is served by the marker strategy
        alone.
        """
        reply = "\n".join([
            "[FILE: lib/main.dart]",
            fenced(MAIN_DART),
            "And the manifest:",
            fenced(PUBSPEC, "yaml"),
        ])
        spy = RecordingStrategy(files=[ExtractedFile(path="pubspec.yaml", content="name: x")])
        extractor = CodeExtractor(strategies=[MarkerDelimitedStrategy(), spy])

        report = extractor.extract_with_report(reply)

        assert report.strategy == "marker"
        assert list(report.files) == ["lib/main.dart"]
        assert spy.calls == 0

    def test_default_cascade_marker_first(self):
        reply = "[FILE: lib/main.dart]\n" + fenced(MAIN_DART) + "\n\n" + fenced(PUBSPEC, "yaml")
        report = CodeExtractor().extract_with_report(reply)

        assert report.strategy == "marker"
        assert "pubspec.yaml" not in report.files

    def test_failing_strategy_is_skipped(self):
        """Test an exception inside a strategy moves on to the next one."""
        good = RecordingStrategy(files=[ExtractedFile(path="lib/a.dart", content="class A {}")])
        extractor = CodeExtractor(strategies=[RecordingStrategy(error=RuntimeError("boom")), good])

        assert extractor.extract_files("anything") == {"lib/a.dart": "class A {}"}
        assert good.calls == 1

    def test_duplicate_paths_last_write_wins(self):
        """Test duplicate paths keep the last content and are reported."""
        reply = "\n".join([
            "[FILE: lib/app.dart]",
            fenced("class First {}"),
            "[FILE: lib/app.dart]",
            fenced("class Second {}"),
        ])
        report = CodeExtractor().extract_with_report(reply)

        assert report.files == {"lib/app.dart": "class Second {}"}
        assert report.duplicates == ["lib/app.dart"]

    def test_recovered_files_are_repaired(self):
        """Test every recovered file goes through the repair engine."""
        reply = "[FILE: lib/main.dart]\n" + fenced("final router = AppRouter.router;")
        files = CodeExtractor().extract_files(reply)

        assert files["lib/main.dart"] == "final router = AppRouter().router;"


class TestMarkerDelimitedStrategy:
    """Tests for explicit file markers."""

    def test_bracketed_marker(self):
        reply = "Here you go:\n\n[FILE: ./lib/main.dart]\n" + fenced(MAIN_DART) + "\n"
        files = MarkerDelimitedStrategy().extract(reply)

        assert files == [ExtractedFile(path="lib/main.dart", content=MAIN_DART)]

    def test_line_marker(self):
        """Test heading-style `FILE:` lines."""
        reply = "### FILE: lib/app.dart\n" + fenced("class MyApp {}") + "\n**FILE: pubspec.yaml**\n" + fenced(
            "name: demo", "yaml"
        )
        files = MarkerDelimitedStrategy().extract(reply)

        assert [f.path for f in files] == ["lib/app.dart", "pubspec.yaml"]
        assert files[0].content == "class MyApp {}"

    def test_banner_marker(self):
        reply = "==========  lib/core/themes/app_theme.dart  ==========\n" + fenced("class AppTheme {}")
        files = MarkerDelimitedStrategy().extract(reply)

        assert files == [ExtractedFile(path="lib/core/themes/app_theme.dart", content="class AppTheme {}")]

    def test_inline_filename(self):
        reply = "`lib/features/home/screens/home_screen.dart`:\n" + fenced("class HomeScreen {}")
        files = MarkerDelimitedStrategy().extract(reply)

        assert [f.path for f in files] == ["lib/features/home/screens/home_screen.dart"]

    def test_no_marker(self):
        assert MarkerDelimitedStrategy().extract(fenced(MAIN_DART)) == []


class TestLooseBlockStrategy:
    """Tests for the fence-splitting strategy."""

    def test_names_blocks_from_preceding_prose(self):
        """Test each block takes the last file marker in the prose before it."""
        reply = (
            "First the entry point, file: lib/main.dart\n"
            f"{FENCE}dart\n{MAIN_DART}\n{FENCE}\n"
            "Old name was file: lib/old.dart\n"
            "Now use File: lib/app.dart\n"
            f"{FENCE}\nclass MyApp {{}}\n{FENCE}\n"
            "No marker here\n"
            f"{FENCE}\nvoid orphan() {{}}\n{FENCE}"
        )
        files = LooseBlockStrategy().extract(reply)

        assert [f.path for f in files] == ["lib/main.dart", "lib/app.dart"]
        assert files[0].content == MAIN_DART

    def test_skips_paths_with_spaces(self):
        reply = f"file: my project notes\n{FENCE}\ntext\n{FENCE}"
        assert LooseBlockStrategy().extract(reply) == []


class TestSignatureStrategy:
    """Tests for content-signature recognition."""

    def test_recognizes_scaffold_files(self):
        """Test mandatory files are named from their content."""
        reply = "Manifest:\n" + fenced(PUBSPEC, "yaml") + "\nEntry point:\n" + fenced(MAIN_DART)
        files = {f.path: f.content for f in SignatureStrategy().extract(reply)}

        assert files == {"pubspec.yaml": PUBSPEC, "lib/main.dart": MAIN_DART}

    def test_only_fenced_blocks_are_searched(self):
        assert SignatureStrategy().extract("void main() { runApp(const MyApp()); }") == []

    def test_extension_allow_list(self):
        """Test signatures outside the allow-list can never produce files."""
        import re

        strategy = SignatureStrategy(
            signatures=[ContentSignature("scripts/setup.sh", re.compile(r"#!/bin/sh"))],
        )
        assert strategy.signatures == ()
        assert strategy.extract(fenced("#!/bin/sh\nrm -rf /", "sh")) == []

    def test_cascade_falls_through_to_signature(self):
        report = CodeExtractor().extract_with_report("Code:\n" + fenced(MAIN_DART))

        assert report.strategy == "signature"
        assert report.files == {"lib/main.dart": MAIN_DART}


class TestHelpers:
    """Tests for extraction helpers."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("lib/main.dart", "lib/main.dart"),
            (" `./lib/main.dart` ", "lib/main.dart"),
            ("**lib/app.dart**", "lib/app.dart"),
            ("lib\\core\\router\\app_router.dart", "lib/core/router/app_router.dart"),
            ("/lib/main.dart", "lib/main.dart"),
            ("lib/features/../app.dart", "lib/app.dart"),
            ("  ", ""),
        ],
    )
    def test_normalize_path(self, raw, expected):
        assert normalize_path(raw) == expected

    def test_fenced_blocks_includes_unclosed_block(self):
        text = f"intro\n{FENCE}dart\nclass A {{}}\n{FENCE}\nmiddle\n{FENCE}\nclass B {{}}"
        assert fenced_blocks(text) == ["class A {}\n", "class B {}"]

    def test_looks_like_project(self):
        """Test the reply sanity check."""
        assert looks_like_project("[FILE: lib/main.dart]\n" + "x" * 200) is True
        assert looks_like_project("pubspec.yaml") is False
        assert looks_like_project("y" * 500) is False
        assert looks_like_project(None) is False
        assert looks_like_project("[FILE: a]", min_chars=0) is True
