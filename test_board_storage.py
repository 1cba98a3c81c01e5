"""Tests for board persistence and the small file helpers it relies on."""

import json

import pytest

from classboard.core.document import add_element, add_page, change_options, new_document
from classboard.core.elements import Circle, FreehandStroke
from classboard.services.board_storage import BoardStorage, is_compatible_version
from classboard.utils.json_utils import safe_json_load, safe_json_save
from classboard.utils.string_utils import page_file_stem, sanitize_filename


@pytest.fixture
def storage(tmp_path):
    return BoardStorage(tmp_path / "boards")


@pytest.fixture
def document():
    doc = add_element(new_document(), Circle(id="c", x=50, y=50, radius=20))
    doc = add_page(doc)
    doc = add_element(doc, FreehandStroke(id="s", points=[(0, 0), (5, 8)], stroke_color="#ff0000"))
    return change_options(doc, tool="rectangle")


class TestBoardStorage:
    def test_save_and_load(self, storage, document):
        assert storage.save_board("lesson-1", document)
        assert storage.has_board("lesson-1")
        assert storage.load_board("lesson-1") == document

    def test_saved_file_records_version(self, storage, document):
        storage.save_board("lesson-1", document)
        data = json.loads(storage.get_board_path("lesson-1").read_text(encoding="utf-8"))
        assert data["format_version"] == "1.0"
        assert "saved_at" in data
        assert len(data["pages"]) == 2

    def test_missing_board(self, storage):
        assert storage.load_board("nothing") is None
        assert not storage.has_board("nothing")

    def test_incompatible_version_rejected(self, storage, document):
        storage.save_board("old", document)
        path = storage.get_board_path("old")
        data = json.loads(path.read_text(encoding="utf-8"))
        data["format_version"] = "2.0"
        path.write_text(json.dumps(data), encoding="utf-8")
        assert storage.load_board("old") is None

    def test_minor_version_accepted(self, storage, document):
        storage.save_board("minor", document)
        path = storage.get_board_path("minor")
        data = json.loads(path.read_text(encoding="utf-8"))
        data["format_version"] = "1.3"
        path.write_text(json.dumps(data), encoding="utf-8")
        assert storage.load_board("minor") == document

    def test_corrupt_file_returns_none(self, storage):
        storage.get_board_path("broken").write_text("{not json", encoding="utf-8")
        assert storage.load_board("broken") is None

    def test_malformed_document_returns_none(self, storage):
        storage.get_board_path("empty").write_text(
            json.dumps({"format_version": "1.0", "pages": []}), encoding="utf-8"
        )
        assert storage.load_board("empty") is None

    def test_list_and_delete(self, storage, document):
        storage.save_board("b", document)
        storage.save_board("a", document)
        assert storage.list_boards() == ["a", "b"]
        assert storage.delete_board("a")
        assert not storage.delete_board("a")
        assert storage.list_boards() == ["b"]

    def test_board_names_are_sanitised(self, storage, document):
        storage.save_board("maths/week 1?", document)
        path = storage.get_board_path("maths/week 1?")
        assert path.parent == storage.base_path
        assert storage.load_board("maths/week 1?") == document

    def test_version_check(self):
        assert is_compatible_version("1.0")
        assert is_compatible_version("1.9")
        assert not is_compatible_version("0.9")
        assert not is_compatible_version("garbage")


class TestFileHelpers:
    def test_json_round_trip(self, tmp_path):
        path = tmp_path / "nested" / "data.json"
        assert safe_json_save(path, {"a": [1, 2]})
        assert safe_json_load(path) == {"a": [1, 2]}
        assert not path.with_suffix(".json.tmp").exists()

    def test_json_load_default(self, tmp_path):
        assert safe_json_load(tmp_path / "missing.json", default={}) == {}

    def test_sanitize_filename(self):
        assert sanitize_filename('a<b>:c"d') == "a_b_c_d"
        assert sanitize_filename("   ") == "untitled"

    def test_page_file_stem(self):
        assert page_file_stem(1, "page-1") == "001_page-1"
        assert page_file_stem(12, "page-12") == "012_page-12"
