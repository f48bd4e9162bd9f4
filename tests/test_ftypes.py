import sys
import os

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from storefront.ftypes import Maybe, Either


def test_maybe_some_and_none():
    just = Maybe.some(42)
    nothing = Maybe.nothing()

    assert just.is_some() and not just.is_none()
    assert nothing.is_none()
    assert just.get_or_else(0) == 42
    assert nothing.get_or_else(0) == 0
    assert Maybe.of(None).is_none()
    assert Maybe.of(0).is_some()


def test_either_left_and_right():
    ok = Either.right(5)
    bad = Either.left("Invalid credentials")

    assert ok.is_right and not bad.is_right
    assert ok.get_or_else(0) == 5
    assert bad.get_or_else(0) == 0
    assert bad.error_or_none() == "Invalid credentials"
    assert ok.error_or_none() is None
