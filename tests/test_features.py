from __future__ import annotations

import pytest

from index.features import FeatureSpaceConfig, TextFeatureSpace, tokenize
from ingestion.records import RecordStore


def _store() -> RecordStore:
    store = RecordStore("Email", ["subject", "body", "spam"])
    store.push_many(
        [
            {"subject": "learning french", "body": "bonjour", "spam": False},
            {"subject": "python typing", "body": "mypy hints", "spam": False},
            {"subject": "Learning Python", "body": None, "spam": True},
        ]
    )
    return store


def test_tokenize_uppercases_by_default():
    assert tokenize("Hello, world_1!") == ["HELLO", "WORLD_1"]
    assert tokenize("Hello", uppercase=False) == ["Hello"]


def test_dim_is_vocabulary_size():
    store = _store()
    space = TextFeatureSpace()
    assert space.dim == 0
    space.update(store.all_records())
    assert set(space.vocab) == {"LEARNING", "FRENCH", "BONJOUR", "PYTHON", "TYPING", "MYPY", "HINTS"}
    assert space.dim == 7
    assert space.df["LEARNING"] == 2


def test_extract_uses_record_id_and_normalizes():
    store = _store()
    space = TextFeatureSpace()
    space.update(store.all_records())
    v = space.extract(store.get(1))
    assert v.doc_id == 1
    assert v.dim == space.dim
    assert v.norm() == pytest.approx(1.0)


def test_unknown_query_terms_ignored():
    space = TextFeatureSpace()
    space.update(_store().all_records())
    q = space.extract({"subject": "completely unseen words"})
    assert q.nnz == 0
    assert q.doc_id == -1


def test_binary_and_tf_weights():
    space = TextFeatureSpace(FeatureSpaceConfig(fields=["subject"], weight="none", normalize=False))
    space.update([{"subject": "spam spam eggs"}])
    v = space.extract({"subject": "spam spam eggs"})
    assert sorted(v.values.values()) == [1.0, 1.0]

    space = TextFeatureSpace(FeatureSpaceConfig(fields=["subject"], weight="tf", normalize=False))
    space.update([{"subject": "spam spam eggs"}])
    v = space.extract({"subject": "spam spam eggs"})
    assert v.values[space.vocab["SPAM"]] == 2.0
    assert v.values[space.vocab["EGGS"]] == 1.0


def test_tfidf_favours_rare_terms():
    space = TextFeatureSpace(FeatureSpaceConfig(normalize=False))
    space.update(_store().all_records())
    assert space.idf("BONJOUR") > space.idf("LEARNING") > 0.0


def test_stopwords_removed():
    cfg = FeatureSpaceConfig(fields=["subject"], stopwords=["the", "a"])
    space = TextFeatureSpace(cfg)
    space.update([{"subject": "The cat and a dog"}])
    assert set(space.vocab) == {"CAT", "AND", "DOG"}


def test_case_preserved_when_not_uppercasing():
    space = TextFeatureSpace(FeatureSpaceConfig(fields=["subject"], uppercase=False))
    space.update([{"subject": "Python python"}])
    assert set(space.vocab) == {"Python", "python"}


def test_html_text_type_strips_markup():
    cfg = FeatureSpaceConfig(fields=["body"], text_type="html")
    space = TextFeatureSpace(cfg)
    space.update([{"body": "<p>Hello <b>world</b></p><script>track()</script>"}])
    assert set(space.vocab) == {"HELLO", "WORLD"}


def test_invalid_config_rejected():
    with pytest.raises(ValueError):
        FeatureSpaceConfig(weight="bm25")
    with pytest.raises(ValueError):
        FeatureSpaceConfig(text_type="pdf")
    with pytest.raises(ValueError):
        FeatureSpaceConfig(fields=[])


def test_extract_corpus():
    store = _store()
    space = TextFeatureSpace()
    space.update(store.all_records())
    corpus = space.extract_corpus(store.all_records())
    assert corpus.ids == [0, 1, 2]
    assert corpus.dim == 7
