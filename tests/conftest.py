"""Test configuration for Mockforge."""

import pytest
from pathlib import Path
import tempfile


MOCKUP_MARKUP = """<mxfile host="embed.diagrams.net" version="27.1.5">
  <diagram id="mockup-diagram" name="Mockup">
    <mxGraphModel dx="452" dy="1633" grid="1" gridSize="10" pageWidth="850" pageHeight="1100">
      <root>
        <mxCell id="0" />
        <mxCell id="1" parent="0" />
        <mxCell id="4" value="" style="group" parent="1" vertex="1" connectable="0">
          <mxGeometry x="30" y="120" width="400" height="760" as="geometry" />
        </mxCell>
        <mxCell id="3" value="Dashboard" style="text;strokeColor=none;align=center;fillColor=none;verticalAlign=middle;rounded=0;" parent="4" vertex="1">
          <mxGeometry x="155" y="70" width="60" height="30" as="geometry" />
        </mxCell>
        <mxCell id="5" value="Create a project" style="fillColor=none;strokeColor=none;fontSize=18;fontColor=#172B4C;fontStyle=1;sketch=1;" parent="4" vertex="1">
          <mxGeometry x="30" y="109" width="240" height="20" as="geometry" />
        </mxCell>
        <mxCell id="6" value="Projects are where your repositories live. They are containers you can group similar repositories in better code organisations." style="fillColor=none;align=left;strokeColor=none;fontColor=#000000;fontSize=12;verticalAlign=top;" parent="4" vertex="1">
          <mxGeometry x="30" y="129" width="310" height="29" as="geometry" />
        </mxCell>
        <mxCell id="7" value="Proyect" style="fillColor=none;strokeColor=none;fontColor=#596780;fontStyle=1;fontSize=11;" parent="4" vertex="1">
          <mxGeometry x="30" y="179" width="240" height="20" as="geometry" />
        </mxCell>
        <mxCell id="8" value="Waremelon" style="rounded=1;arcSize=9;fillColor=#ffffff;align=left;spacingLeft=5;strokeColor=#4C9AFF;strokeWidth=2;fontColor=#000000;fontSize=12;" parent="4" vertex="1">
          <mxGeometry x="30" y="204" width="290" height="40" as="geometry" />
        </mxCell>
        <mxCell id="9" value="Key" style="fillColor=none;strokeColor=none;fontColor=#596780;fontStyle=1;fontSize=11;" parent="4" vertex="1">
          <mxGeometry x="30" y="254" width="240" height="20" as="geometry" />
        </mxCell>
        <mxCell id="11" value="Stash" style="rounded=1;arcSize=9;fillColor=#F7F8F9;align=left;spacingLeft=5;strokeColor=#DEE1E6;strokeWidth=2;fontColor=#596780;fontSize=12;" parent="4" vertex="1">
          <mxGeometry x="30" y="279" width="290" height="40" as="geometry" />
        </mxCell>
        <mxCell id="12" value="Description" style="fillColor=none;strokeColor=none;fontColor=#596780;fontStyle=1;fontSize=11;" parent="4" vertex="1">
          <mxGeometry x="30" y="329" width="240" height="20" as="geometry" />
        </mxCell>
        <mxCell id="14" value="Project permissions" style="fillColor=none;strokeColor=none;fontColor=#172B4C;fontStyle=1;fontSize=14;" parent="4" vertex="1">
          <mxGeometry x="30" y="489" width="240" height="20" as="geometry" />
        </mxCell>
        <mxCell id="16" value="Read and write" style="shape=ellipse;fillColor=#ffffff;strokeColor=#0057D8;strokeWidth=4;fontColor=#000000;align=left;labelPosition=right;spacingLeft=10;" parent="4" vertex="1">
          <mxGeometry x="41" y="539" width="10" height="10" as="geometry" />
        </mxCell>
        <mxCell id="17" value="Read only" style="shape=ellipse;rounded=1;fillColor=#F0F2F5;strokeColor=#D8DCE3;fontColor=#000000;align=left;labelPosition=right;spacingLeft=10;" parent="4" vertex="1">
          <mxGeometry x="40" y="559" width="12" height="12" as="geometry" />
        </mxCell>
        <mxCell id="18" value="None" style="shape=ellipse;rounded=1;fillColor=#F0F2F5;strokeColor=#D8DCE3;fontColor=#000000;align=left;labelPosition=right;spacingLeft=10;" parent="4" vertex="1">
          <mxGeometry x="40" y="579" width="12" height="12" as="geometry" />
        </mxCell>
        <mxCell id="19" value="Publish" style="rounded=1;fillColor=#0057D8;strokeColor=none;fontColor=#ffffff;align=center;fontSize=14;" parent="4" vertex="1">
          <mxGeometry x="125" y="590" width="60" height="33" as="geometry" />
        </mxCell>
        <mxCell id="20" value="Cancel" style="fillColor=none;strokeColor=none;fontColor=#596780;align=center;fontSize=14;" parent="4" vertex="1">
          <mxGeometry x="195" y="590" width="60" height="33" as="geometry" />
        </mxCell>
        <mxCell id="2" value="" style="verticalLabelPosition=bottom;verticalAlign=top;strokeWidth=1;shape=mxgraph.android.phone2;strokeColor=#c0c0c0;" parent="4" vertex="1">
          <mxGeometry y="-10" width="400" height="770" as="geometry" />
        </mxCell>
        <mxCell id="21" value="" style="verticalLabelPosition=bottom;verticalAlign=top;strokeWidth=1;shape=mxgraph.android.phone2;strokeColor=#c0c0c0;" parent="1" vertex="1">
          <mxGeometry x="460" y="110" width="360" height="780" as="geometry" />
        </mxCell>
        <mxCell id="22" value="Dasboard" style="text;strokeColor=none;align=center;fillColor=none;verticalAlign=middle;rounded=0;" parent="1" vertex="1">
          <mxGeometry x="610" y="210" width="60" height="30" as="geometry" />
        </mxCell>
        <mxCell id="23" value="Primary" style="rounded=1;fillColor=#0057D8;strokeColor=none;fontColor=#ffffff;align=center;fontSize=12;" parent="1" vertex="1">
          <mxGeometry x="600" y="720" width="86" height="33" as="geometry" />
        </mxCell>
      </root>
    </mxGraphModel>
  </diagram>
</mxfile>"""


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests.

    Yields:
        Path: A Path object pointing to the temporary directory.
            The directory is automatically cleaned up after the test.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def mockup_markup():
    """Two-phone mockup with a dashboard and a project creation form.

    Returns:
        str: Diagram markup with the Dashboard and CreateProject vocabularies,
            a three-option permission radio group ("Read and write" selected)
            and two device frames.
    """
    return MOCKUP_MARKUP


@pytest.fixture
def mockup_file(temp_dir, mockup_markup):
    """Write the mockup markup to a file.

    Returns:
        Path: The path to the created markup file.
    """
    path = temp_dir / "mockup.drawio"
    path.write_text(mockup_markup, encoding="utf-8")
    return path


@pytest.fixture
def storage(temp_dir):
    """Create a storage backend for testing.

    Args:
        temp_dir: Pytest fixture providing a temporary directory path.

    Returns:
        LocalStorageBackend: A local storage backend instance configured
            to use the temporary directory.
    """
    from mockforge.storage import LocalStorageBackend
    return LocalStorageBackend(temp_dir)
