"""Tests for custom-code regions and the region-preserving writer."""

import pytest

from formwork.core.errors import RegionError
from formwork.stacks.base import extract_regions, merge_regions, write_tree

RENDERED = """\
def resolve_total(obj):
    # formwork:begin resolve_total
    return obj.price * obj.quantity
    # formwork:end resolve_total


VERSION = 2
"""

EDITED = """\
def resolve_total(obj):
    # formwork:begin resolve_total
    subtotal = obj.price * obj.quantity
    return subtotal * 1.2
    # formwork:end resolve_total


VERSION = 1
"""


class TestExtract:
    def test_bodies_by_id(self):
        regions = extract_regions(EDITED)
        assert regions == {"resolve_total": "    subtotal = obj.price * obj.quantity\n    return subtotal * 1.2\n"}

    def test_any_comment_syntax(self):
        text = "// formwork:begin Posts_extra\nconst x = 1;\n// formwork:end Posts_extra\n"
        assert extract_regions(text) == {"Posts_extra": "const x = 1;\n"}

    def test_empty_region(self):
        assert extract_regions("# formwork:begin a\n# formwork:end a\n") == {"a": ""}

    @pytest.mark.parametrize(
        "text",
        [
            "# formwork:begin a\n# formwork:begin b\n# formwork:end b\n# formwork:end a\n",
            "# formwork:begin a\n# formwork:end a\n# formwork:begin a\n# formwork:end a\n",
            "# formwork:end a\n",
            "# formwork:begin a\nbody\n",
            "# formwork:begin a\n# formwork:end b\n",
        ],
    )
    def test_malformed_markers(self, text):
        with pytest.raises(RegionError):
            extract_regions(text, "x.py", "backend")


class TestMerge:
    def test_region_body_survives(self):
        merged, dropped = merge_regions(RENDERED, EDITED)
        assert "return subtotal * 1.2" in merged
        assert "return obj.price * obj.quantity" not in merged
        assert "VERSION = 2" in merged
        assert dropped == []

    def test_new_region_keeps_rendered_body(self):
        merged, _ = merge_regions(RENDERED, "VERSION = 1\n")
        assert merged == RENDERED

    def test_dropped_regions_are_reported(self):
        existing = "# formwork:begin gone\nkeep me\n# formwork:end gone\n"
        merged, dropped = merge_regions(RENDERED, existing)
        assert merged == RENDERED
        assert dropped == ["gone"]


class TestWriteTree:
    def test_first_write(self, tmp_path):
        result = write_tree({"app/x.py": RENDERED, "a.txt": "hello\n"}, tmp_path, "backend")
        assert result.written == [tmp_path / "a.txt", tmp_path / "app" / "x.py"]
        assert (tmp_path / "app" / "x.py").read_text() == RENDERED

    def test_unchanged_files_are_not_rewritten(self, tmp_path):
        write_tree({"x.py": RENDERED}, tmp_path, "backend")
        result = write_tree({"x.py": RENDERED}, tmp_path, "backend")
        assert result.written == []
        assert result.unchanged == [tmp_path / "x.py"]

    def test_regions_are_byte_identical_after_regeneration(self, tmp_path):
        target = tmp_path / "x.py"
        target.write_text(EDITED)
        result = write_tree({"x.py": RENDERED}, tmp_path, "backend")
        assert result.written == [target]
        content = target.read_text()
        assert extract_regions(content) == extract_regions(EDITED)
        assert "VERSION = 2" in content

        again = write_tree({"x.py": RENDERED}, tmp_path, "backend")
        assert again.written == []
        assert target.read_text() == content

    def test_dropped_region_warning(self, tmp_path):
        (tmp_path / "x.py").write_text("# formwork:begin old\ncustom\n# formwork:end old\n")
        result = write_tree({"x.py": RENDERED}, tmp_path, "backend")
        assert result.warnings == ["x.py: custom region 'old' no longer exists and was dropped"]

    def test_malformed_existing_file(self, tmp_path):
        (tmp_path / "x.py").write_text("# formwork:begin a\n")
        with pytest.raises(RegionError) as exc_info:
            write_tree({"x.py": RENDERED}, tmp_path, "backend")
        assert exc_info.value.generator == "backend"
        assert "never closed" in exc_info.value.message

    def test_emptied_region_stays_empty(self, tmp_path):
        target = tmp_path / "x.py"
        write_tree({"x.py": RENDERED}, tmp_path, "backend")
        emptied = RENDERED.replace("    return obj.price * obj.quantity\n", "")
        target.write_text(emptied)

        result = write_tree({"x.py": RENDERED}, tmp_path, "backend")

        assert result.unchanged == [target]
        assert target.read_text() == emptied
        assert extract_regions(target.read_text()) == {"resolve_total": ""}

    def test_emptied_region_dropped_warning(self, tmp_path):
        (tmp_path / "x.py").write_text("# formwork:begin old\n# formwork:end old\n")
        result = write_tree({"x.py": RENDERED}, tmp_path, "backend")
        assert result.warnings == ["x.py: custom region 'old' no longer exists and was dropped"]

    def test_malformed_file_leaves_tree_untouched(self, tmp_path):
        broken = "# formwork:begin x\n"
        (tmp_path / "b.py").write_text(broken)

        with pytest.raises(RegionError):
            write_tree({"a.py": RENDERED, "b.py": RENDERED, "c.py": RENDERED}, tmp_path, "backend")

        assert not (tmp_path / "a.py").exists()
        assert not (tmp_path / "c.py").exists()
        assert (tmp_path / "b.py").read_text() == broken
