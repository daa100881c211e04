from medscan.domain.normalizer import normalize_text

SAMPLES = [
    "",
    "   ",
    "Metformin 500mg",
    "  METFORMIN HCl\n500 MG tablets  ",
    "Rx#12345 -- Lisinopril/10mg (Generic)",
    "***",
    "Atorvastatin\tCalcium 20mg",
]


def test_none_is_empty():
    n = normalize_text(None)
    assert n.text == ""
    assert n.tokens == ()


def test_lowercase_trim_and_split():
    n = normalize_text("  Rx#12345 -- Lisinopril/10mg (Generic) ")
    assert n.text == "rx#12345 -- lisinopril/10mg (generic)"
    assert n.tokens == ("rx", "12345", "lisinopril", "10mg", "generic")


def test_only_separators_gives_no_tokens():
    assert normalize_text("*** --- ///").tokens == ()


def test_idempotent():
    for s in SAMPLES:
        once = normalize_text(s)
        assert normalize_text(once.text) == once


def test_tokens_are_non_empty():
    for s in SAMPLES:
        assert all(normalize_text(s).tokens)
