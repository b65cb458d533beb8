"""Unit tests for screen detection."""

import pytest

from mockforge.models.screens import ScreenDetectionResult
from mockforge.services.detection import ScreenDetector
from mockforge.services.detection.service import normalize_title
from mockforge.services.detection.vocabulary import (
    ContentFamily,
    RadioVocabulary,
    ScreenFamily,
)


GENERIC_TWO_PHONES = """<mxGraphModel>
  <root>
    <mxCell id="2" value="" style="shape=mxgraph.android.phone2;strokeColor=#c0c0c0;" vertex="1" />
    <mxCell id="3" value="Welcome back" style="text;strokeColor=none;" vertex="1" />
    <mxCell id="4" value="Your email" style="rounded=1;strokeColor=#DEE1E6;" vertex="1" />
    <mxCell id="5" value="Submit" style="rounded=1;fillColor=#0057D8;strokeColor=none;" vertex="1" />
    <mxCell id="6" value="" style="shape=mxgraph.android.phone2;strokeColor=#c0c0c0;" vertex="1" />
    <mxCell id="7" value="Latest news" style="text;strokeColor=none;" vertex="1" />
  </root>
</mxGraphModel>"""

RADIO_ONLY = """<root>
  <mxCell id="1" value="User access" style="text;" vertex="1" />
  <mxCell id="2" value="Read only" style="shape=ellipse;fillColor=#F0F2F5;strokeColor=#D8DCE3;" vertex="1" />
  <mxCell id="3" value="" style="rounded=1;fillColor=#ffffff;strokeColor=#0057D8;strokeWidth=4;" vertex="1" />
  <mxCell id="4" value="None" style="shape=ellipse;fillColor=#F0F2F5;strokeColor=#D8DCE3;" vertex="1" />
  <mxCell id="5" value="Read and write" style="text;align=left;" vertex="1" />
</root>"""


@pytest.fixture
def detector():
    return ScreenDetector()


class TestMockupDetection:
    """Tests against the two-phone dashboard/project mockup."""

    def test_detects_both_screens(self, detector, mockup_markup):
        """Test the dashboard and project screens are found in order.

        Verifies that two device frames are counted and that the two known
        screen families become the detected screens, with a drawer.
        """
        result = detector.detect_screens(mockup_markup)

        assert result.phone_count == 2
        assert result.has_multiple_screens is True
        assert result.should_create_drawer is True
        assert result.detected_screens == ["DashboardScreen", "CreateProjectScreen"]
        assert [s.title for s in result.screen_sections] == result.detected_screens

    def test_detects_fields_and_buttons(self, detector, mockup_markup):
        """Test form fields and buttons of both screens are found."""
        result = detector.detect_screens(mockup_markup)

        for field in ("Waremelon", "Stash", "Key", "Description"):
            assert field in result.detected_fields
        for button in ("Publish", "Cancel", "Primary"):
            assert button in result.detected_buttons

        project = next(s for s in result.screen_sections if s.title == "CreateProjectScreen")
        assert "Waremelon" in project.fields
        assert "Stash" in project.fields
        assert project.buttons == ("Publish", "Cancel")

        dashboard = result.screen_sections[0]
        assert dashboard.buttons == ("Primary",)

    def test_detects_permission_radio_group(self, detector, mockup_markup):
        """Test the permission options are grouped with the styled one selected.

        Verifies that the group keeps the source order of its options and
        that only the option carrying the selection color pair is selected.
        """
        result = detector.detect_screens(mockup_markup)

        assert len(result.detected_radio_groups) == 1
        group = result.detected_radio_groups[0]
        assert group.title == "User access"
        assert [o.text for o in group.options] == ["Read and write", "Read only", "None"]
        assert [o.is_selected for o in group.options] == [True, False, False]
        assert group.selected.text == "Read and write"

        project = next(s for s in result.screen_sections if s.title == "CreateProjectScreen")
        assert project.radio_groups == (group,)

    def test_detects_texts(self, detector, mockup_markup):
        """Test label texts are recovered."""
        result = detector.detect_screens(mockup_markup)

        assert "Dashboard" in result.all_texts
        assert "Create a project" in result.all_texts
        assert "Project permissions" in result.all_texts
        assert "Projects are where your repositories live" in result.all_texts
        assert len(result.all_texts) == len(set(result.all_texts))

    def test_content_families(self, detector, mockup_markup):
        """Test project content is recognized and registration content is not."""
        result = detector.detect_screens(mockup_markup)

        assert result.has_project_content is True
        assert result.has_register_content is False

    def test_describes_sections(self, detector, mockup_markup):
        result = detector.detect_screens(mockup_markup)

        project = result.screen_sections[1]
        assert project.description.startswith("Project creation form with")
        assert "1 option group" in project.description

    def test_camel_case_serialization(self, detector, mockup_markup):
        """Test the result serializes with camelCase keys."""
        data = detector.detect_screens(mockup_markup).model_dump(by_alias=True)

        assert data["phoneCount"] == 2
        assert data["detectedScreens"] == ["DashboardScreen", "CreateProjectScreen"]
        assert data["screenSections"][1]["radioGroups"][0]["options"][0]["isSelected"] is True


class TestEmptyAndOddInput:
    """Tests for input that carries no usable structure."""

    def test_empty_markup(self, detector):
        """Test empty markup yields the zero-value result."""
        result = detector.detect_screens("")

        assert result.phone_count == 0
        assert result.has_multiple_screens is False
        assert result.detected_screens == []
        assert result == ScreenDetectionResult.empty()

    @pytest.mark.parametrize(
        "markup",
        [
            None,
            "   \n\t",
            "<<<>>>",
            'value="',
            "value='unterminated",
            "\x00\xff�",
            "shape=ellipse shape=ellipse Read only",
            "shape=mxgraph.android.phone2" * 50,
            "<" * 5000 + ">" * 5000,
            "fillColor=#ffffff;strokeColor=#0057D8" * 20,
        ],
    )
    def test_never_raises(self, detector, markup):
        """Test detection degrades instead of failing on malformed markup."""
        result = detector.detect_screens(markup)

        assert result.phone_count >= 0
        assert len(result.detected_screens) == len(result.screen_sections)
        assert len(set(result.detected_screens)) == len(result.detected_screens)

    def test_unusable_family_table_is_contained(self):
        """Test a failing detection pass returns the empty result."""

        class BrokenFamily(ScreenFamily):
            def matches(self, markup):
                raise RuntimeError("boom")

        detector = ScreenDetector(families=[BrokenFamily(name="Broken", anchor_texts=("x",))])
        assert detector.detect_screens("<mxCell value='x' />") == ScreenDetectionResult.empty()


class TestGenericDetection:
    """Tests for markup without known screen vocabulary."""

    def test_two_phones_without_vocabulary(self, detector):
        """Test two device frames still produce a drawer and two screens.

        Verifies that a generic main screen is built from the recovered texts
        and a secondary screen is added for the second device frame.
        """
        result = detector.detect_screens(GENERIC_TWO_PHONES)

        assert result.phone_count == 2
        assert result.should_create_drawer is True
        assert len(result.screen_sections) >= 2
        assert result.detected_screens == ["MainScreen", "SecondaryScreen"]

        main = result.screen_sections[0]
        assert "Your email" in main.fields
        assert "Submit" in main.buttons
        assert "Welcome back" in main.texts

    def test_two_phones_without_any_text(self, detector):
        markup = '<a style="shape=mxgraph.android.phone2" /><b style="shape=mxgraph.android.phone2" />'
        result = detector.detect_screens(markup)

        assert result.should_create_drawer is True
        assert result.detected_screens == ["MainScreen", "SecondaryScreen"]

    def test_bare_device_frame_marker(self, detector):
        """Test frames written without the shape= prefix are still counted."""
        markup = '<mxCell style="mxgraph.android.phone2;strokeWidth=2;"/><mxCell style="mxgraph.android.phone2;"/>'
        result = detector.detect_screens(markup)

        assert result.phone_count == 2
        assert result.should_create_drawer is True
        assert result.detected_screens == ["MainScreen", "SecondaryScreen"]

    def test_no_phones_no_vocabulary(self, detector):
        result = detector.detect_screens('<mxCell value="Lorem ipsum" />')

        assert result.phone_count == 0
        assert result.screen_sections == []
        assert "Lorem ipsum" in result.all_texts

    def test_custom_family_table(self):
        """Test new screen families are pure data."""
        families = [
            ScreenFamily(
                name="Checkout",
                anchor_texts=("Order summary",),
                field_vocabulary=("Card number",),
                button_vocabulary=("Pay now",),
                radio_vocabulary=(RadioVocabulary("Shipping", ("Standard", "Express")),),
            )
        ]
        detector = ScreenDetector(
            families=families,
            register_content=ContentFamily("register"),
            project_content=ContentFamily("project"),
        )
        markup = (
            '<c value="Order summary" /><c value="Card number" /><c value="Pay now" />'
            '<c value="Standard" style="shape=ellipse;fillColor=#ffffff;strokeColor=#0057D8" />'
            '<c value="Express" style="shape=ellipse;fillColor=#eeeeee" />'
        )
        result = detector.detect_screens(markup)

        assert result.detected_screens == ["CheckoutScreen"]
        assert result.detected_fields == ["Card number"]
        assert result.detected_buttons == ["Pay now"]
        assert result.detected_radio_groups[0].selected.text == "Standard"


class TestRadioGroups:
    """Tests for radio group recovery."""

    def test_two_ellipses_three_labels(self, detector):
        """Test one group with three options in source order.

        Verifies that only the option preceded by the selection color pair
        is marked selected.
        """
        groups = detector.extract_radio_groups(RADIO_ONLY)

        assert len(groups) == 1
        options = groups[0].options
        assert [o.text for o in options] == ["Read only", "None", "Read and write"]
        assert [o.is_selected for o in options] == [False, True, False]

    def test_detect_screens_reports_groups_without_sections(self, detector):
        result = detector.detect_screens(RADIO_ONLY)

        assert result.screen_sections == []
        assert len(result.detected_radio_groups) == 1

    def test_single_ellipse_is_not_a_group(self, detector):
        markup = RADIO_ONLY.replace("shape=ellipse;", "", 1)
        assert detector.extract_radio_groups(markup) == []

    def test_default_unselected(self, detector):
        """Test no option is selected without the color pair."""
        markup = RADIO_ONLY.replace("strokeColor=#0057D8", "strokeColor=#D8DCE3")
        groups = detector.extract_radio_groups(markup)

        assert groups[0].selected is None
        assert not any(o.is_selected for o in groups[0].options)

    def test_options_match_whole_labels_only(self, detector):
        """Test prose starting with an option label does not add that option."""
        markup = RADIO_ONLY.replace('value="None"', 'value="Maybe"').replace(
            '<mxCell id="1"', '<mxCell id="0" value="None of these apply" style="text;" vertex="1" />\n  <mxCell id="1"'
        )
        options = detector.extract_radio_groups(markup)[0].options

        assert [o.text for o in options] == ["Read only", "Read and write"]

    def test_at_most_one_selected(self, detector):
        markup = RADIO_ONLY.replace("fillColor=#F0F2F5;strokeColor=#D8DCE3", "fillColor=#ffffff;strokeColor=#0057D8")
        options = detector.extract_radio_groups(markup)[0].options

        assert sum(o.is_selected for o in options) == 1
        assert options[0].is_selected is True


class TestHelpers:
    """Tests for detection helpers."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Dashboard", "DashboardScreen"),
            ("create a project", "CreateAProjectScreen"),
            ("HomeScreen", "HomeScreen"),
            ("", "MainScreen"),
            ("  user-profile ", "UserProfileScreen"),
        ],
    )
    def test_normalize_title(self, raw, expected):
        assert normalize_title(raw) == expected

    def test_count_device_frames(self, detector):
        markup = 'style="shape=mxgraph.android.phone2;" style="shape=mxgraph.android.tab2;"'
        assert detector.count_device_frames(markup) == 1

    @pytest.mark.parametrize(
        "markup,count",
        [
            ('style="mxgraph.android.phone2;strokeWidth=2;"', 1),
            ('style="shape=mxgraph.android.phone2;" style="mxgraph.android.phone2;"', 2),
            ('shape="mxgraph.android.phone2"', 1),
        ],
    )
    def test_count_device_frames_with_and_without_shape(self, detector, markup, count):
        assert detector.count_device_frames(markup) == count

    def test_extract_texts_filters_noise(self, detector):
        """Test placeholders, numbers, hex literals and style fragments are dropped."""
        markup = (
            '<c value="Text" /><c value="12345" /><c value="#FFAA00" />'
            '<c value="fontSize=12;style=x" /><c value="Sign in" />'
            '<c value="&lt;b&gt;Bold&lt;/b&gt; label" />'
        )
        texts = detector.extract_texts(markup)

        assert "Sign in" in texts
        assert "Bold label" in texts
        assert "Text" not in texts
        assert "12345" not in texts
        assert "#FFAA00" not in texts
        assert not any("style=" in t for t in texts)

    def test_extract_colors(self, detector):
        """Test the palette takes the first distinct colors and fills the rest."""
        palette = detector.extract_colors("fillColor=#0057d8;strokeColor=#FFFFFF;fontColor=#0057d8")

        assert palette.primary == "0xFF0057D8"
        assert palette.secondary == "0xFFFFFFFF"
        assert palette.accent == "0xFF2196F3"

    def test_extract_colors_defaults(self, detector):
        palette = detector.extract_colors("")
        assert palette.primary == "0xFF0057D8"
