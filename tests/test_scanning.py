import os
import pytest
from pathlib import Path

from media_renamer.exceptions import InvalidPatternError
from media_renamer.models import DiscoveryErrorKind
from media_renamer.scanning.filesystem import GlobMatcher, display_path, iter_media_assets
from media_renamer.scanning.pattern import GlobPattern


def names(paths):
    return [p.name for p in paths]


# --- Pattern compilation ---

@pytest.mark.parametrize(
    "pattern,name,expected",
    [
        ("*.jpg", "photo.jpg", True),
        ("*.jpg", "photo.JPG", False),
        ("IMG_?.jpg", "IMG_1.jpg", True),
        ("IMG_?.jpg", "IMG_12.jpg", False),
        ("[ab]*.jpg", "a1.jpg", True),
        ("[ab]*.jpg", "c1.jpg", False),
        ("[!ab]*.jpg", "c1.jpg", True),
        ("[a-c]x", "bx", True),
        ("[]]x", "]x", True),
        ("*", ".hidden", True),
        ("a+b(1).jpg", "a+b(1).jpg", True),
    ],
)
def test_component_matching(pattern, name, expected):
    glob = GlobPattern.compile(pattern)
    assert glob.components[-1].matches(name) is expected


def test_case_insensitive_component():
    glob = GlobPattern.compile("IMG*", case_insensitive=True)
    assert glob.components[0].matches("img_001.jpg")


@pytest.mark.parametrize("pattern", ["a**", "***", "**b/c", "[abc", "x/[!", "[z-a]"])
def test_invalid_patterns_raise(pattern):
    with pytest.raises(InvalidPatternError):
        GlobPattern.compile(pattern)


def test_pattern_splits_components():
    glob = GlobPattern.compile("/photos//**/*.jpg")
    assert glob.absolute
    assert [c.text for c in glob.components] == ["photos", "**", "*.jpg"]
    assert glob.components[0].literal
    assert glob.components[1].recursive


# --- GlobMatcher ---

def test_matches_are_canonical_and_sorted_case_insensitively(in_tmp):
    (in_tmp / "B.jpg").write_bytes(b"b")
    (in_tmp / "a.JPG").write_bytes(b"a")
    (in_tmp / "c.jpg").write_bytes(b"c")

    paths, errors = GlobMatcher().evaluate("*", case_insensitive=False)

    assert errors == []
    assert names(paths) == ["a.JPG", "B.jpg", "c.jpg"]
    assert all(p.is_absolute() for p in paths)
    assert paths[0] == (in_tmp / "a.JPG").resolve()


def test_case_sensitive_by_default(in_tmp):
    (in_tmp / "img_001.jpg").write_bytes(b"x")

    paths, _ = GlobMatcher().evaluate("IMG*")
    assert paths == []

    paths, _ = GlobMatcher().evaluate("IMG*", case_insensitive=True)
    assert names(paths) == ["img_001.jpg"]


def test_case_insensitive_literal_component(in_tmp):
    sub = in_tmp / "Photos"
    sub.mkdir()
    (sub / "Shot.JPG").write_bytes(b"x")

    paths, _ = GlobMatcher().evaluate("photos/shot.jpg", case_insensitive=True)
    assert paths == [(sub / "Shot.JPG").resolve()]


def test_directories_only(in_tmp):
    (in_tmp / "one").mkdir()
    (in_tmp / "two").mkdir()

    paths, errors = GlobMatcher().evaluate("*")

    # Directories are matched here, the asset cursor drops them
    assert len(paths) == 2
    assert errors == []
    assert list(iter_media_assets(paths)) == []


def test_recursive_pattern(in_tmp):
    (in_tmp / "top.jpg").write_bytes(b"x")
    deep = in_tmp / "a" / "b"
    deep.mkdir(parents=True)
    (deep / "deep.jpg").write_bytes(b"x")
    (in_tmp / "a" / "note.txt").write_text("x")

    paths, errors = GlobMatcher().evaluate("**/*.jpg")

    assert errors == []
    assert names(paths) == ["deep.jpg", "top.jpg"]


def test_trailing_recursive_pattern_matches_only_directories(in_tmp):
    sub = in_tmp / "album"
    sub.mkdir()
    (sub / "x.jpg").write_bytes(b"x")
    (sub / "inner").mkdir()
    (sub / "inner" / "y.mp4").write_bytes(b"y")

    paths, errors = GlobMatcher().evaluate("album/**")

    assert errors == []
    assert paths == [sub.resolve(), (sub / "inner").resolve()]
    assert all(p.is_dir() for p in paths)
    assert list(iter_media_assets(paths)) == []


def test_bare_recursive_pattern_renames_nothing(in_tmp):
    (in_tmp / "top.jpg").write_bytes(b"x")
    (in_tmp / "sub").mkdir()
    (in_tmp / "sub" / "deep.jpg").write_bytes(b"x")

    paths, _ = GlobMatcher().evaluate("**")

    assert in_tmp.resolve() in paths
    assert list(iter_media_assets(paths)) == []


def test_absolute_pattern(tmp_path):
    (tmp_path / "shot.jpg").write_bytes(b"x")

    paths, errors = GlobMatcher().evaluate(str(tmp_path.resolve() / "*.jpg"))

    assert errors == []
    assert paths == [(tmp_path / "shot.jpg").resolve()]


def test_missing_literal_prefix_is_not_an_error(in_tmp):
    paths, errors = GlobMatcher().evaluate("nowhere/*.jpg")
    assert paths == []
    assert errors == []


def test_invalid_pattern_is_fatal(in_tmp):
    with pytest.raises(InvalidPatternError):
        GlobMatcher().evaluate("photos/a**.jpg")


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
def test_symlinks_dropped_unless_included(in_tmp):
    target = in_tmp / "real.jpg"
    target.write_bytes(b"x")
    (in_tmp / "link.jpg").symlink_to(target)

    paths, errors = GlobMatcher().evaluate("link*.jpg")
    assert paths == []
    assert errors == []

    paths, errors = GlobMatcher().evaluate("link*.jpg", include_symlinks=True)
    assert paths == [target.resolve()]
    assert errors == []


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
def test_links_to_same_file_reported_once(in_tmp):
    target = in_tmp / "real.jpg"
    target.write_bytes(b"x")
    (in_tmp / "alias.jpg").symlink_to(target)

    paths, _ = GlobMatcher().evaluate("*.jpg", include_symlinks=True)
    assert paths == [target.resolve()]


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
def test_broken_symlink_is_a_discovery_error(in_tmp):
    (in_tmp / "good.jpg").write_bytes(b"x")
    (in_tmp / "broken.jpg").symlink_to(in_tmp / "missing.jpg")

    paths, errors = GlobMatcher().evaluate("*.jpg", include_symlinks=True)

    assert names(paths) == ["good.jpg"]
    assert len(errors) == 1
    assert errors[0].kind is DiscoveryErrorKind.CANONICALIZE
    assert errors[0].path == Path("broken.jpg")
    assert "Failed to evaluate glob" in str(errors[0])


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
def test_symlinked_directories_followed_only_when_included(in_tmp):
    real = in_tmp / "real"
    real.mkdir()
    (real / "inside.jpg").write_bytes(b"x")
    (in_tmp / "linked").symlink_to(real, target_is_directory=True)
    # A loop back to the top must not recurse forever
    (real / "loop").symlink_to(in_tmp, target_is_directory=True)

    paths, _ = GlobMatcher().evaluate("linked/*.jpg")
    assert names(paths) == ["inside.jpg"]   # literal components are always followed

    paths, _ = GlobMatcher().evaluate("*/*.jpg")
    assert names(paths) == ["inside.jpg"]   # only via the real directory

    paths, errors = GlobMatcher().evaluate("**/*.jpg", include_symlinks=True)
    assert names(paths) == ["inside.jpg"]
    assert errors == []


def test_canonicalization_errors_are_sorted_and_do_not_stop_evaluation(in_tmp, monkeypatch):
    for name in ("c.jpg", "B.jpg", "a.jpg", "D.jpg"):
        (in_tmp / name).write_bytes(b"x")

    matcher = GlobMatcher()
    original = matcher._canonicalize

    def flaky(path):
        if path in ("D.jpg", "B.jpg"):
            raise PermissionError(13, "Permission denied", path)
        return original(path)

    monkeypatch.setattr(matcher, "_canonicalize", flaky)
    paths, errors = matcher.evaluate("*.jpg")

    assert names(paths) == ["a.jpg", "c.jpg"]
    assert [e.path.name for e in errors] == ["B.jpg", "D.jpg"]
    assert "Permission denied" in errors[0].description


@pytest.mark.skipif(os.name != "posix" or os.geteuid() == 0, reason="needs a non-root POSIX user")
def test_unreadable_directory_is_a_discovery_error(in_tmp):
    locked = in_tmp / "locked"
    locked.mkdir()
    (locked / "x.jpg").write_bytes(b"x")
    (in_tmp / "open.jpg").write_bytes(b"x")
    locked.chmod(0)
    try:
        paths, errors = GlobMatcher().evaluate("**/*.jpg")
    finally:
        locked.chmod(0o755)

    assert names(paths) == ["open.jpg"]
    assert len(errors) == 1
    assert errors[0].kind is DiscoveryErrorKind.PATTERN_MATCH


# --- Asset cursor ---

def test_iter_media_assets_is_lazy(tmp_path):
    a = tmp_path / "a.jpg"
    a.write_bytes(b"a")

    assets = iter_media_assets([a, tmp_path / "gone.jpg"])
    first = next(assets)

    assert first.path == a
    assert not first.is_open
    # Vanished files are filtered like directories
    assert list(assets) == []


def test_display_path_strips_root(tmp_path):
    p = tmp_path / "sub" / "x.jpg"
    assert display_path(p, tmp_path) == os.path.join("sub", "x.jpg")
    assert display_path(p, tmp_path / "other") == str(p)
    assert display_path(p) == str(p)
