from research_agent.tools.text_utils import collapse_whitespace, redact, safe_name, tokenize


def test_tokenize_splits_on_non_alphanumerics():
    assert tokenize("X causes Y!") == ["x", "causes", "y"]
    assert tokenize("Deep-Learning, for   X (2023)") == ["deep", "learning", "for", "x", "2023"]


def test_tokenize_drops_empty_tokens():
    assert tokenize("") == []
    assert tokenize("  --  ") == []
    assert tokenize(None) == []


def test_collapse_whitespace():
    assert collapse_whitespace("  A\n  multi-line\ttitle ") == "A multi-line title"


def test_safe_name():
    assert safe_name("My Project/2024") == "My_Project_2024"
    assert safe_name("ok-name.v1") == "ok-name.v1"


def test_redact_keeps_last_chars():
    assert redact("sk-abcdef1234") == "*********1234"
    assert redact("abc") == "****"
    assert redact("") == ""
