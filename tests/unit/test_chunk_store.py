"""
Chunk Store Tests
==================

Loading invariants:
    norm == max(1, ||embedding||)
    text_lower == text.lower()
    insertion order preserved
Malformed corpora raise LoadError; an empty corpus is valid.
"""

from __future__ import annotations

import json
import math

import pytest
from pydantic import ValidationError

from groundrag.exceptions import LoadError
from groundrag.ingest.chunk_store import ChunkStore, load_chunks
from groundrag.retrieve.scorer import vector_norm
from tests.conftest import make_chunk


@pytest.mark.unit
class TestNormInvariant:

    def test_norm_is_l2_when_above_one(self):
        chunk = make_chunk(embedding=(3.0, 4.0))
        assert chunk.norm == pytest.approx(5.0)

    def test_unit_vector_norm(self):
        chunk = make_chunk(embedding=(0.6, 0.8))
        assert chunk.norm == pytest.approx(1.0)

    def test_zero_vector_floors_to_one(self):
        chunk = make_chunk(embedding=(0.0, 0.0, 0.0))
        assert chunk.norm == 1.0

    def test_small_vector_floors_to_one(self):
        chunk = make_chunk(embedding=(0.1, 0.2))
        assert chunk.norm == 1.0

    def test_norm_matches_query_norm(self):
        chunk = make_chunk(embedding=(2.0, 0.5))
        assert chunk.norm == vector_norm(chunk.embedding)

    def test_empty_embedding(self):
        chunk = make_chunk(embedding=())
        assert chunk.norm == 1.0
        assert chunk.embedding.size == 0

    @pytest.mark.parametrize("embedding", [
        (2.0, 2.0, 2.0),
        (10.0, -3.0),
        (0.5, 0.5, 0.5, 0.5),
        (-7.0,),
    ])
    def test_norm_property(self, embedding):
        chunk = make_chunk(embedding=embedding)
        true_norm = math.sqrt(sum(v * v for v in embedding))
        assert chunk.norm >= 1.0
        if true_norm > 1.0:
            assert chunk.norm == pytest.approx(true_norm)
        else:
            assert chunk.norm == 1.0


@pytest.mark.unit
class TestLoading:

    def test_values_coerced_to_float(self):
        chunks = load_chunks({"a": {"text": "Teks", "embedding": ["3", 4]}})
        assert chunks[0].embedding.tolist() == [3.0, 4.0]
        assert chunks[0].norm == pytest.approx(5.0)

    def test_text_lower_cached(self):
        chunk = make_chunk(text="Pasal 28 AYAT (1)")
        assert chunk.text_lower == "pasal 28 ayat (1)"

    def test_insertion_order_preserved(self):
        mapping = {
            "z.txt": {"text": "satu", "embedding": [1]},
            "a.txt": {"text": "dua", "embedding": [1]},
            "m.txt": {"text": "tiga", "embedding": [1]},
        }
        assert [c.key for c in load_chunks(mapping)] == ["z.txt", "a.txt", "m.txt"]

    def test_empty_mapping_is_valid(self):
        assert load_chunks({}) == []
        assert ChunkStore.from_mapping({}).size == 0

    def test_empty_text_skipped(self):
        mapping = {
            "a": {"text": "", "embedding": [1]},
            "b": {"embedding": [1]},
            "c": {"text": "isi", "embedding": [1]},
        }
        assert [c.key for c in load_chunks(mapping)] == ["c"]

    def test_missing_embedding_is_empty_vector(self):
        chunks = load_chunks({"a": {"text": "isi"}})
        assert chunks[0].embedding.size == 0


@pytest.mark.unit
class TestLoadErrors:

    @pytest.mark.parametrize("corpus", [[], "text", 42, None])
    def test_not_a_mapping(self, corpus):
        with pytest.raises(LoadError):
            load_chunks(corpus)

    def test_entry_not_a_mapping(self):
        with pytest.raises(LoadError):
            load_chunks({"a": ["text", [1, 2]]})

    def test_non_numeric_embedding(self):
        with pytest.raises(LoadError):
            load_chunks({"a": {"text": "isi", "embedding": [1, "x"]}})

    def test_embedding_not_a_sequence(self):
        with pytest.raises(LoadError):
            load_chunks({"a": {"text": "isi", "embedding": "0.1,0.2"}})

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf"), "NaN"])
    def test_non_finite_embedding(self, value):
        with pytest.raises(LoadError):
            load_chunks({"a": {"text": "isi", "embedding": [value, 1.0]}})

    def test_non_finite_json_file(self, tmp_path):
        path = tmp_path / "embeddings.json"
        path.write_text('{"a": {"text": "isi", "embedding": [NaN, 1.0]}}', encoding="utf-8")
        with pytest.raises(LoadError):
            ChunkStore.from_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(LoadError):
            ChunkStore.from_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "embeddings.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(LoadError):
            ChunkStore.from_file(path)


@pytest.mark.unit
class TestImmutability:

    def test_chunk_is_frozen(self):
        chunk = make_chunk()
        with pytest.raises(ValidationError):
            chunk.text = "changed"

    def test_embedding_is_read_only(self):
        chunk = make_chunk(embedding=(1.0, 2.0))
        with pytest.raises(ValueError):
            chunk.embedding[0] = 5.0


@pytest.mark.unit
def test_from_file_roundtrip(tmp_path):
    path = tmp_path / "embeddings.json"
    path.write_text(json.dumps({
        "bab1.txt": {"text": "Pancasila adalah dasar negara.", "embedding": [0.1, 0.2]},
        "bab2.txt": {"text": "Kedaulatan di tangan rakyat.", "embedding": [0.3, 0.4]},
    }), encoding="utf-8")

    store = ChunkStore.from_file(path)
    assert store.size == 2
    assert len(store) == 2
    assert [c.key for c in store] == ["bab1.txt", "bab2.txt"]
