from pathlib import Path

import pytest

from medscan.domain.catalog import Catalog
from medscan.domain.models import MedicationRecord

ROOT = Path(__file__).resolve().parents[2]


def test_sample_catalog_order():
    cat = Catalog.sample()
    assert [r.name for r in cat] == ["Metformin", "Lisinopril", "Atorvastatin"]
    assert cat.first().name == "Metformin"


def test_searchable_text_joins_and_normalizes():
    cat = Catalog.sample()
    assert cat.searchable_text(0) == "metformin metformin hydrochloride 500mg generic"
    assert cat.searchable_tokens(1) == ("lisinopril", "lisinopril", "10mg", "generic")


def test_searchable_text_skips_missing_fields():
    cat = Catalog([MedicationRecord(id="x", name="Ibuprofen", dosage="200mg")])
    assert cat.searchable_text(0) == "ibuprofen 200mg"


def test_records_are_immutable():
    rec = Catalog.sample().first()
    with pytest.raises(Exception):
        rec.name = "Other"


def test_camel_case_aliases_roundtrip():
    rec = Catalog.sample().get("1")
    out = rec.to_public()
    assert out["genericName"] == "Metformin Hydrochloride"
    assert "Nausea" in out["sideEffects"]


def test_yaml_catalog_loads():
    cat = Catalog.from_yaml(ROOT / "config" / "catalog.yaml")
    assert len(cat) == 5
    assert cat.get("5").generic_name == "Omeprazole"


def test_load_falls_back_to_sample(tmp_path):
    bad = tmp_path / "catalog.yaml"
    bad.write_text("medications: 42\n", encoding="utf-8")
    assert len(Catalog.load(bad)) == 3
    assert len(Catalog.load(tmp_path / "missing.yaml")) == 3
    assert len(Catalog.load(None)) == 3


def test_suggestions_are_first_records():
    cat = Catalog.from_yaml(ROOT / "config" / "catalog.yaml")
    assert [r.id for r in cat.suggestions(2)] == ["1", "2"]
