"""Tests for dispatcher.py — per-entry decisions and their outcomes."""
from unittest.mock import MagicMock, patch

import pytest

from dispatcher import derived_image_name, ensure_destination_for
from models import EntryKind, Outcome, QualityTier, ReconcileSummary, Settings
from transforms import CopyTransformer, TransformError, Transformer
from tests.conftest import exif_tags, make_file


@pytest.fixture
def no_exif():
    with patch("exif_reader.exifread.process_file", return_value={}):
        yield


def _dispatch(entry, dest, settings, transformer=None, summary=None):
    return ensure_destination_for(
        entry, dest, settings, transformer or CopyTransformer(), summary=summary
    )


class TestDerivedImageName:
    def test_dated(self, src):
        f = make_file(src / "photo.jpg")
        with patch("exif_reader.exifread.process_file",
                   return_value=exif_tags(date="2010:03:14 11:22:33")):
            assert derived_image_name(f) == "   2010-03-14 11;22;33 photo.jpg.jpg"

    def test_undated(self, src, no_exif):
        f = make_file(src / "photo.png")
        assert derived_image_name(f) == "photo.png.jpg"


class TestDirectories:
    def test_creates_directory_and_recurses(self, src, tgt, settings):
        (src / "album").mkdir()
        assert _dispatch(src / "album", tgt, settings) is Outcome.RECURSE
        assert (tgt / "album").is_dir()

    def test_replaces_file_with_directory(self, src, tgt, settings):
        (src / "album").mkdir()
        make_file(tgt / "album", b"in the way")
        assert _dispatch(src / "album", tgt, settings) is Outcome.RECURSE
        assert (tgt / "album").is_dir()


class TestImages:
    def test_creates_derived_image(self, src, tgt, settings, no_exif):
        f = make_file(src / "photo.jpg", b"pixels")
        assert _dispatch(f, tgt, settings) is Outcome.CREATED
        assert (tgt / "photo.jpg.jpg").read_bytes() == b"pixels"

    def test_existing_destination_skipped(self, src, tgt, settings, no_exif):
        f = make_file(src / "photo.jpg", b"pixels")
        make_file(tgt / "photo.jpg.jpg", b"old")
        transformer = MagicMock(spec=Transformer)
        assert _dispatch(f, tgt, settings, transformer) is Outcome.SKIPPED
        transformer.transform_image.assert_not_called()
        assert (tgt / "photo.jpg.jpg").read_bytes() == b"old"

    def test_quality_tier_forwarded(self, src, tgt, no_exif):
        f = make_file(src / "photo.tif")
        transformer = MagicMock(spec=Transformer)
        settings = Settings(quality=QualityTier.THUMBNAIL)
        _dispatch(f, tgt, settings, transformer)
        transformer.transform_image.assert_called_once_with(
            f, tgt / "photo.tif.jpg", QualityTier.THUMBNAIL
        )

    def test_transform_error_is_not_fatal(self, src, tgt, settings, no_exif, capsys):
        f = make_file(src / "broken.jpg")
        transformer = MagicMock(spec=Transformer)
        transformer.transform_image.side_effect = TransformError(f, "cannot decode image")
        summary = ReconcileSummary(source_path=str(src), destination_path=str(tgt))

        assert _dispatch(f, tgt, settings, transformer, summary) is Outcome.FAILED
        assert summary.files_errored == 1
        assert summary.errors[0][0] == str(f)
        assert "cannot decode image" in capsys.readouterr().err

    def test_dangling_symlink_not_written_through(self, src, tgt, tmp_path, settings, no_exif):
        f = make_file(src / "photo.jpg", b"pixels")
        outside = tmp_path / "outside.jpg"
        (tgt / "photo.jpg.jpg").symlink_to(outside)

        assert _dispatch(f, tgt, settings) is Outcome.CREATED
        assert not outside.exists()
        assert not (tgt / "photo.jpg.jpg").is_symlink()
        assert (tgt / "photo.jpg.jpg").read_bytes() == b"pixels"


class TestVideos:
    def test_dangling_symlink_replaced(self, src, tgt, tmp_path, video_settings):
        f = make_file(src / "clip.mov", b"frames")
        outside = tmp_path / "outside.mov"
        (tgt / "clip.mov").symlink_to(outside)

        assert _dispatch(f, tgt, video_settings) is Outcome.CREATED
        assert not outside.exists()
        assert (tgt / "clip.mov").read_bytes() == b"frames"

    def test_ignored_without_flag(self, src, tgt, settings):
        f = make_file(src / "clip.m4v")
        assert _dispatch(f, tgt, settings) is Outcome.IGNORED
        assert not (tgt / "clip.m4v").exists()

    def test_copied_with_flag(self, src, tgt, video_settings):
        f = make_file(src / "clip.m4v", b"frames")
        assert _dispatch(f, tgt, video_settings) is Outcome.CREATED
        assert (tgt / "clip.m4v").read_bytes() == b"frames"

    def test_existing_video_skipped(self, src, tgt, video_settings):
        f = make_file(src / "clip.avi", b"new")
        make_file(tgt / "clip.avi", b"old")
        assert _dispatch(f, tgt, video_settings) is Outcome.SKIPPED
        assert (tgt / "clip.avi").read_bytes() == b"old"


class TestOtherFiles:
    @pytest.mark.parametrize("name", ["notes.txt", "README", "raw.cr2"])
    def test_ignored(self, src, tgt, settings, name):
        f = make_file(src / name)
        assert _dispatch(f, tgt, settings) is Outcome.IGNORED
        assert list(tgt.iterdir()) == []

    def test_precomputed_kind_is_used(self, src, tgt, settings):
        f = make_file(src / "photo.jpg")
        transformer = MagicMock(spec=Transformer)
        outcome = ensure_destination_for(
            f, tgt, settings, transformer, kind=EntryKind.OTHER
        )
        assert outcome is Outcome.IGNORED
        transformer.transform_image.assert_not_called()


class TestVerboseOutput:
    def test_create_is_printed(self, src, tgt, no_exif, capsys):
        f = make_file(src / "photo.jpg")
        _dispatch(f, tgt, Settings(verbose=True))
        assert "CREATE" in capsys.readouterr().out

    def test_quiet_by_default(self, src, tgt, settings, no_exif, capsys):
        f = make_file(src / "photo.jpg")
        _dispatch(f, tgt, settings)
        assert capsys.readouterr().out == ""
