"""Tests for the reader contract.

WHY: Document ids come from the reader. A named reader output must keep its
names; an unnamed one must get "{file}_{n}" ids. Everything downstream (DTM
row names) relies on this.

HOW: Custom and built-in readers run through ifiles/as_documents and the
resulting ids are checked, including through a full create_dtm pass.
"""

import json

import pytest

from textvec import create_dtm, create_vocabulary, ifiles, itoken, vocab_vectorizer
from textvec.readers import JsonlReader, as_documents, build_reader, read_file, read_jsonl, read_lines


def named_reader(path):
    return {f"doc-{i}": line for i, line in enumerate(path.read_text(encoding="utf-8").splitlines())}


def unnamed_reader(path):
    return path.read_text(encoding="utf-8").splitlines()


class TestReaderContract:
    def test_named_output_keeps_names(self, corpus_files):
        docs = list(ifiles(corpus_files[:1], reader=named_reader))
        assert docs[0].ids == ["doc-0", "doc-1"]
        assert docs[0].texts == ["the cat sat", "the dog sat"]

    def test_unnamed_output_gets_file_and_line_ids(self, corpus_files):
        docs = list(ifiles(corpus_files, reader=unnamed_reader))
        assert docs[0].ids == ["a.txt_1", "a.txt_2"]
        assert docs[1].ids == ["b.txt_1"]
        assert docs[2].ids == ["c.txt_1", "c.txt_2"]

    def test_ids_are_deterministic(self, corpus_files):
        it = ifiles(corpus_files, reader=unnamed_reader)
        first = [d.ids for d in it]
        second = [d.ids for d in it]
        assert first == second

    def test_non_string_keys_are_coerced(self, tmp_path):
        docs = as_documents(tmp_path / "x.txt", {1: "one", 2: "two"})
        assert docs.ids == ["1", "2"]

    def test_dtm_rows_carry_reader_names(self, corpus_files):
        it = itoken(ifiles(corpus_files[:1], reader=named_reader))
        dtm = create_dtm(it, vocab_vectorizer(create_vocabulary(it)))
        assert dtm.row_names == ["doc-0", "doc-1"]

    def test_dtm_rows_fall_back_to_generated_ids(self, corpus_files):
        it = itoken(ifiles(corpus_files, reader=unnamed_reader))
        dtm = create_dtm(it, vocab_vectorizer(create_vocabulary(it)))
        assert dtm.row_names == ["a.txt_1", "a.txt_2", "b.txt_1", "c.txt_1", "c.txt_2"]


class TestContractViolations:
    def test_single_string_is_rejected(self, tmp_path):
        with pytest.raises(TypeError, match="single str"):
            as_documents(tmp_path / "x.txt", "one document")

    def test_non_iterable_is_rejected(self, tmp_path):
        with pytest.raises(TypeError, match="not iterable"):
            as_documents(tmp_path / "x.txt", 42)

    def test_non_string_document_is_rejected(self, tmp_path):
        with pytest.raises(TypeError, match="expected str"):
            as_documents(tmp_path / "x.txt", ["ok", 3])

    def test_missing_file_propagates(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            list(ifiles([tmp_path / "missing.txt"]))


class TestBuiltinReaders:
    def test_read_lines_keeps_blank_lines(self, tmp_path):
        p = tmp_path / "x.txt"
        p.write_text("one\n\n  \ntwo\n", encoding="utf-8")
        assert read_lines(p) == ["one", "", "  ", "two"]

    def test_line_ids_follow_physical_line_numbers(self, tmp_path):
        p = tmp_path / "a.txt"
        p.write_text("one\n\nthree\n", encoding="utf-8")
        chunk = next(iter(itoken(ifiles([p]))))
        assert chunk.ids == ["a.txt_1", "a.txt_2", "a.txt_3"]
        assert chunk.tokens[2] == ["three"]
        assert chunk.tokens[1] == []

    def test_read_file_names_document_by_stem(self, tmp_path):
        p = tmp_path / "report.txt"
        p.write_text("whole text", encoding="utf-8")
        assert read_file(p) == {"report": "whole text"}

    def test_read_jsonl(self, tmp_path):
        p = tmp_path / "docs.jsonl"
        rows = [{"id": "x1", "text": "hello"}, {"id": 7, "text": "world"}]
        p.write_text("\n".join(json.dumps(r) for r in rows) + "\n\n", encoding="utf-8")
        docs = as_documents(p, read_jsonl(p))
        assert docs.ids == ["x1", "7"]
        assert docs.texts == ["hello", "world"]

    def test_jsonl_custom_fields(self, tmp_path):
        p = tmp_path / "docs.jsonl"
        p.write_text(json.dumps({"key": "k", "body": "b"}) + "\n", encoding="utf-8")
        assert JsonlReader(id_field="key", text_field="body")(p) == {"k": "b"}

    def test_read_pdf_pages(self, tmp_path):
        fitz = pytest.importorskip("fitz")
        pdf_path = tmp_path / "guide.pdf"
        doc = fitz.open()
        for text in ["first page", "second page"]:
            page = doc.new_page()
            page.insert_text((72, 72), text)
        doc.save(pdf_path)
        doc.close()

        docs = list(ifiles([pdf_path], reader=build_reader({"type": "pdf"})))
        assert docs[0].ids == ["guide_p0001", "guide_p0002"]
        assert "first page" in docs[0].texts[0]


class TestBuildReader:
    def test_default_is_lines(self):
        assert build_reader(None) is read_lines

    def test_jsonl_fields(self):
        r = build_reader({"type": "jsonl", "id_field": "doc_id", "text_field": "body"})
        assert r == JsonlReader(id_field="doc_id", text_field="body")

    def test_unknown_type(self):
        with pytest.raises(ValueError, match="Unknown reader type"):
            build_reader({"type": "xml"})
