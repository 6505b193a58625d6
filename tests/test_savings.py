from tooncodec.codec import encode
from tooncodec.model.values import from_python
from tooncodec.utils.savings import estimate_savings, estimate_tokens


def test_estimate_tokens_rounds_up() -> None:
    assert estimate_tokens("") == 0
    assert estimate_tokens("abcd") == 1
    assert estimate_tokens("abcde") == 2


def test_tables_save_tokens() -> None:
    data = {"users": [{"id": index, "name": f"user{index}"} for index in range(20)]}

    savings = estimate_savings(encode(data), data)

    assert 0 < savings < 100


def test_savings_formula() -> None:
    # JSON {"a":1} is 7 chars (2 tokens); "a: 1" is 4 chars (1 token).
    assert estimate_savings("a: 1", {"a": 1}) == 50


def test_savings_never_negative() -> None:
    assert estimate_savings("x" * 400, {"a": 1}) == 0


def test_accepts_tagged_values() -> None:
    assert estimate_savings("a: 1", from_python({"a": 1})) == 50
