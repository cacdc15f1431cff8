import pathlib

import pytest

from modvendor.errors import PatternError
from modvendor.manifest import ModuleRecord
from modvendor.selector import collect_candidates, scope_dirs, select_in_scope, validate_pattern


def _record(mod_dir: pathlib.Path, packages=()) -> ModuleRecord:
    return ModuleRecord(
        import_path="example.com/foo",
        version="v1.0.0",
        source_path=None,
        source_version=None,
        dir=mod_dir,
        packages=tuple(packages),
    )


@pytest.fixture()
def foo_dir(make_module):
    return make_module(
        "example.com/foo",
        "v1.0.0",
        {
            "top.h": b"top",
            "bar/x.h": b"x",
            "bar/x.go": b"package bar",
            "baz/y.h": b"y",
            "baz/deep/er/z.proto": b"syntax = \"proto3\";",
        },
    )


def test_collect_recursive_pattern(foo_dir):
    got = collect_candidates(["**/*.h"], _record(foo_dir))
    assert got == (foo_dir / "bar" / "x.h", foo_dir / "baz" / "y.h", foo_dir / "top.h")


def test_collect_single_segment_pattern(foo_dir):
    assert collect_candidates(["*.h"], _record(foo_dir)) == (foo_dir / "top.h",)
    assert collect_candidates(["bar/*"], _record(foo_dir)) == (foo_dir / "bar" / "x.go", foo_dir / "bar" / "x.h")


def test_collect_merges_patterns_without_duplicates(foo_dir):
    got = collect_candidates(["**/*.h", "bar/*.h", "**/*.proto"], _record(foo_dir))
    assert len(got) == len(set(got)) == 4
    assert foo_dir / "baz" / "deep" / "er" / "z.proto" in got


def test_collect_no_matches_is_empty(foo_dir):
    assert collect_candidates(["**/*.c"], _record(foo_dir)) == ()


@pytest.mark.parametrize("bad", ["", "/abs/*.h", "a**/*.h", "**x/*.h", "[abc.h", "../*.h", "sub/../../x/*.h"])
def test_malformed_patterns_are_rejected(bad):
    with pytest.raises(PatternError, match="glob match failure"):
        validate_pattern(bad)


@pytest.mark.parametrize("good", ["**/*.h", "*.proto", "include/[a-z]*.h", "a/**/b/?.c"])
def test_valid_patterns(good):
    validate_pattern(good)


def test_collect_raises_on_malformed_pattern(foo_dir):
    with pytest.raises(PatternError):
        collect_candidates(["**/*.h", "x**"], _record(foo_dir))


def test_filter_keeps_only_imported_packages(foo_dir):
    record = _record(foo_dir, ["example.com/foo/bar"])
    candidates = (foo_dir / "bar" / "x.h", foo_dir / "baz" / "y.h")

    assert select_in_scope(record, candidates) == (foo_dir / "bar" / "x.h",)


def test_filter_extra_include_prefix(foo_dir):
    record = _record(foo_dir, ["example.com/foo/bar"])
    candidates = (foo_dir / "bar" / "x.h", foo_dir / "baz" / "y.h")

    got = select_in_scope(record, candidates, ["example.com/foo/baz", "example.com/other/baz"])

    assert got == candidates


def test_filter_include_does_not_mutate_record(foo_dir):
    record = _record(foo_dir, ["example.com/foo/bar"])
    select_in_scope(record, (foo_dir / "baz" / "y.h",), ["example.com/foo/baz"])
    assert record.packages == ("example.com/foo/bar",)


def test_filter_no_packages_selects_nothing(foo_dir):
    candidates = collect_candidates(["**/*.h"], _record(foo_dir))
    assert select_in_scope(_record(foo_dir), candidates) == ()
    assert select_in_scope(_record(foo_dir), candidates, ["example.com/unrelated"]) == ()


def test_filter_root_package_selects_everything(foo_dir):
    candidates = collect_candidates(["**/*.h"], _record(foo_dir))
    assert select_in_scope(_record(foo_dir, ["example.com/foo"]), candidates) == candidates


def test_filter_foreign_package_scopes_whole_module(foo_dir):
    candidates = collect_candidates(["**/*.h"], _record(foo_dir))
    record = _record(foo_dir, ["example.com/elsewhere/pkg"])

    assert scope_dirs(record) == (foo_dir,)
    assert select_in_scope(record, candidates) == candidates


def test_filter_uses_plain_string_prefix(foo_dir):
    sibling = foo_dir / "barbaz" / "w.h"
    record = _record(foo_dir, ["example.com/foo/bar"])
    assert select_in_scope(record, (sibling,)) == (sibling,)


def test_filter_empty_candidates(foo_dir):
    assert select_in_scope(_record(foo_dir, ["example.com/foo/bar"]), ()) == ()


def test_scope_dirs_nested_package(foo_dir):
    record = _record(foo_dir, ["example.com/foo/baz/deep"])
    assert scope_dirs(record) == (foo_dir / "baz" / "deep",)


def test_collect_rejects_pattern_leaving_module(foo_dir, make_module):
    make_module("example.com/other", "v9.9.9", {"secret.h": b"secret"})
    with pytest.raises(PatternError, match="inside the module"):
        collect_candidates(["../other@v9.9.9/*.h"], _record(foo_dir))
