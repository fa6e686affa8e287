import threading

import pytest

from klog.verbosity import VerbositySyntaxError, VState


def _enabled_in_other_file(vs, level):
    """Check verbosity as seen from a call site in threading.py."""
    result = []
    thread = threading.Thread(target=lambda: result.append(vs.enabled(level, 1)))
    thread.start()
    thread.join()
    return result[0]


def test_v():
    vs = VState()
    vs.v().set("2")
    assert vs.enabled(1, 0) is True
    assert vs.enabled(2, 0) is True
    assert vs.enabled(3, 0) is False


def test_vmodule_on():
    vs = VState()
    vs.vmodule().set("test_verbosity=2")
    assert vs.enabled(1, 0) is True
    assert vs.enabled(2, 0) is True
    assert vs.enabled(3, 0) is False
    assert _enabled_in_other_file(vs, 1) is False
    assert _enabled_in_other_file(vs, 2) is False
    assert _enabled_in_other_file(vs, 3) is False


def test_depth_selects_other_file():
    vs = VState()
    vs.vmodule().set("threading=2")
    assert _enabled_in_other_file(vs, 2) is True
    assert vs.enabled(2, 0) is False


V_GLOBS = [
    ("test_verbosity=1", False),
    ("test_verbosity=2", True),
    ("test_verbosity=3", True),
    ("*=2", True),
    ("?e*=2", True),
    ("????_*=2", True),
    ("??[stx]?_*y=2", True),
    ("t[^x]st_*=2", True),
    ("*x=2", False),
    ("m*=2", False),
    ("??_*=2", False),
    ("?[abc]?_*t=2", False),
    ("[=2", False),
]


@pytest.mark.parametrize("pattern,match", V_GLOBS)
def test_vmodule_glob(pattern, match):
    vs = VState()
    vs.vmodule().set(pattern)
    assert vs.enabled(2, 0) is match


def test_vmodule_change_wipes_cache():
    vs = VState()

    def probe():
        return vs.enabled(2, 0)

    vs.vmodule().set("test_verbosity=1")
    assert probe() is False
    vs.vmodule().set("test_verbosity=2")
    assert probe() is True


def test_setting_v_keeps_vmodule():
    vs = VState()
    vs.vmodule().set("test_verbosity=3")
    vs.v().set("1")
    assert str(vs.vmodule()) == "test_verbosity=3"
    assert vs.enabled(3, 0) is True
    assert vs.v().get() == 1


def test_level_spec_values():
    vs = VState()
    assert vs.v().get() == 0
    vs.v().set("5")
    assert str(vs.v()) == "5"
    vs.v().set("-1")
    assert vs.v().get() == -1


def test_types():
    vs = VState()
    assert vs.v().type() == "Level"
    assert vs.vmodule().type() == "pattern=N,..."


@pytest.mark.parametrize("value", ["x", "", "1.5", "99999999999"])
def test_level_set_invalid(value):
    vs = VState()
    with pytest.raises(VerbositySyntaxError):
        vs.v().set(value)


@pytest.mark.parametrize("value", ["a", "=1", "a=", "a=b", "a=1=2"])
def test_vmodule_set_syntax_error(value):
    vs = VState()
    with pytest.raises(VerbositySyntaxError, match="syntax error"):
        vs.vmodule().set(value)


def test_vmodule_negative_level():
    vs = VState()
    with pytest.raises(ValueError, match="negative value for vmodule level"):
        vs.vmodule().set("a=-1")
    assert str(vs.vmodule()) == ""