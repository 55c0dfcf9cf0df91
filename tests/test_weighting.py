"""Tests for TF-IDF, row normalization and cosine similarity."""

import numpy as np
import pytest

from textvec import TfIdf, create_dtm, create_vocabulary, itoken, most_similar, normalize, sim2, vocab_vectorizer
from textvec.weighting import tfidf_from_cfg

DOCS = {
    "cats": "cat cat purr",
    "dogs": "dog dog bark",
    "mixed": "cat dog",
}


@pytest.fixture
def dtm():
    it = itoken(DOCS)
    return create_dtm(it, vocab_vectorizer(create_vocabulary(it)))


class TestNormalize:
    def test_l1_rows_sum_to_one(self, dtm):
        out = normalize(dtm, "l1")
        np.testing.assert_allclose(np.asarray(out.matrix.sum(axis=1)).ravel(), 1.0)
        assert out.row_names == dtm.row_names

    def test_l2_rows_have_unit_norm(self, dtm):
        out = normalize(dtm, "l2").matrix.toarray()
        np.testing.assert_allclose(np.linalg.norm(out, axis=1), 1.0)

    def test_none_and_invalid(self, dtm):
        assert normalize(dtm, "none") is dtm
        with pytest.raises(ValueError, match="Unknown norm"):
            normalize(dtm, "max")


class TestTfIdf:
    def test_rare_terms_weigh_more(self, dtm):
        out = TfIdf(norm="none").fit_transform(dtm)
        m = out.matrix.tocsr()
        row = out.row_names.index("cats")
        cat, purr = out.col_names.index("cat"), out.col_names.index("purr")
        # cat: tf 2, in 2 docs; purr: tf 1, in 1 doc
        assert m[row, purr] > m[row, cat] / 2

    def test_transform_keeps_names_and_shape(self, dtm):
        model = TfIdf().fit(dtm)
        out = model.transform(dtm)
        assert out.shape == dtm.shape
        assert out.col_names == dtm.col_names
        assert model.idf.shape == (dtm.shape[1],)

    def test_transform_before_fit(self, dtm):
        with pytest.raises(RuntimeError):
            TfIdf().transform(dtm)

    def test_column_mismatch(self, dtm):
        model = TfIdf().fit(dtm)
        other = create_dtm(itoken(["x"]), vocab_vectorizer(create_vocabulary(["x"])))
        with pytest.raises(ValueError, match="columns"):
            model.transform(other)

    def test_from_cfg(self):
        model = tfidf_from_cfg({"norm": "l1", "sublinear_tf": True})
        assert model.norm == "l1" and model.sublinear_tf is True and model.smooth_idf is True
        with pytest.raises(ValueError):
            tfidf_from_cfg({"norm": "l3"})


class TestSimilarity:
    def test_sim2_self(self, dtm):
        s = sim2(dtm)
        assert s.shape == (3, 3)
        np.testing.assert_allclose(np.diag(s), 1.0)
        assert s[0, 1] == pytest.approx(0.0)

    def test_most_similar_orders_by_score(self, dtm):
        vec = vocab_vectorizer(create_vocabulary(itoken(DOCS)))
        query = create_dtm(itoken(["cat purr"]), vec)
        results = most_similar(query, dtm, k=2)
        assert [r.name for r in results] == ["cats", "mixed"]
        assert results[0].score >= results[1].score

    def test_empty_query_is_rejected(self, dtm):
        vec = vocab_vectorizer(create_vocabulary(itoken(DOCS)))
        empty = create_dtm(itoken([]), vec)
        with pytest.raises(ValueError, match="Empty query"):
            most_similar(empty, dtm)

    def test_k_larger_than_rows(self, dtm):
        assert len(most_similar(dtm, dtm, k=10)) == 3

    def test_column_mismatch(self, dtm):
        other = create_dtm(itoken(["x"]), vocab_vectorizer(create_vocabulary(["x"])))
        with pytest.raises(ValueError, match="Column mismatch"):
            sim2(dtm, other)
