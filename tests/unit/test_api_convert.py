"""Tests for the conversion pipeline API."""

from unittest.mock import patch

import pytest

from tenkiconv.api.convert import Direction, ScriptConverter
from tenkiconv.codec import TranslationTable, read_table
from tenkiconv.config import TenkiConvSettings
from tenkiconv.exceptions import (
    MissingCompanionFileError,
    StructuralMismatchError,
    TenkiConvError,
)
from tenkiconv.parser.models import Record, RecordType
from tenkiconv.storage import decode_records
from tests.script_builders import (
    SAMPLE_LINES,
    SAMPLE_RECORDS,
    SCENE_ID,
    read_script_lines,
    write_section,
)


@pytest.fixture
def converter():
    return ScriptConverter(TenkiConvSettings(_env_file=None))


def translate(csv_path, **translations):
    """Fill the Translation column of an exported sheet."""
    table = read_table(csv_path)
    updated = TranslationTable()
    for row in table.rows():
        updated.put(
            row.key,
            row.original,
            translations.get(row.key.lstrip("@"), row.translation),
            row.speaker,
        )
    csv_path.write_bytes(updated.encode())


class TestDirection:
    """Test choosing a direction from the file extension."""

    @pytest.mark.parametrize(
        ("name", "direction"),
        [
            ("scene.txt", Direction.EXTERNALIZE),
            ("scene.TXT", Direction.EXTERNALIZE),
            ("scene.meta", Direction.INTERNALIZE),
            ("scene.csv", Direction.INTERNALIZE),
            ("scene.spt", None),
            ("scene", None),
        ],
    )
    def test_direction_for(self, tmp_path, name, direction):
        assert ScriptConverter.direction_for(tmp_path / name) is direction

    def test_from_config_uses_global_settings(self, isolated_settings):
        assert ScriptConverter.from_config().settings is isolated_settings


class TestExternalizeFile:
    """Test turning a script into .meta and .csv files."""

    def test_writes_meta_and_csv(self, converter, sample_bundle):
        result = converter.externalize_file(sample_bundle)

        meta = sample_bundle.with_suffix(".meta")
        csv_path = sample_bundle.with_suffix(".csv")
        assert result.success
        assert result.outputs == [meta, csv_path]
        assert result.stats == {"lines": 3, "names": 1, "sections": 1}
        assert read_script_lines(meta)[2:5] == ["@N1（０１２３）", "@L1", "@--"]
        assert read_table(csv_path).get("@L1") == (
            "おはよう。\n今日もいい天気だね。",
            "",
            "綾乃",
        )

    def test_script_and_sections_untouched(self, converter, sample_bundle):
        spt = sample_bundle.parent / f"{SCENE_ID}.spt"
        before = (sample_bundle.read_bytes(), spt.read_bytes())

        converter.externalize_file(sample_bundle)

        assert (sample_bundle.read_bytes(), spt.read_bytes()) == before

    def test_lf_newlines(self, sample_bundle):
        settings = TenkiConvSettings(_env_file=None, script_newline="lf")
        ScriptConverter(settings).externalize_file(sample_bundle)
        assert b"\r\n" not in sample_bundle.with_suffix(".meta").read_bytes()

    def test_dry_run_writes_nothing(self, sample_bundle):
        settings = TenkiConvSettings(_env_file=None, dry_run=True)

        result = ScriptConverter(settings).externalize_file(sample_bundle)

        assert result.success
        assert not sample_bundle.with_suffix(".meta").exists()
        assert not sample_bundle.with_suffix(".csv").exists()

    def test_mismatch_writes_nothing(self, converter, sample_bundle):
        records = [Record(*r.as_tuple()) for r in SAMPLE_RECORDS]
        records[2] = Record(RecordType.TEXT)
        write_section(sample_bundle.parent, SCENE_ID, records)

        with pytest.raises(StructuralMismatchError):
            converter.externalize_file(sample_bundle)
        assert not sample_bundle.with_suffix(".meta").exists()

    def test_strict_records(self, sample_bundle):
        records = [Record(*r.as_tuple()) for r in SAMPLE_RECORDS]
        records[1].line_count = 9
        write_section(sample_bundle.parent, SCENE_ID, records)

        ScriptConverter(TenkiConvSettings(_env_file=None)).externalize_file(
            sample_bundle
        )
        strict = TenkiConvSettings(_env_file=None, strict_records=True)
        with pytest.raises(StructuralMismatchError):
            ScriptConverter(strict).externalize_file(sample_bundle)

    def test_missing_script(self, converter, tmp_path):
        with pytest.raises(MissingCompanionFileError):
            converter.externalize_file(tmp_path / "nope.txt")


class TestInternalizeFile:
    """Test rebuilding a script from .meta and .csv files."""

    def test_round_trip_without_translation(self, converter, sample_bundle):
        spt = sample_bundle.parent / f"{SCENE_ID}.spt"
        original = (sample_bundle.read_bytes(), spt.read_bytes())
        converter.externalize_file(sample_bundle)
        sample_bundle.unlink()

        result = converter.internalize_file(sample_bundle.with_suffix(".csv"))

        assert result.success
        assert result.outputs == [sample_bundle, spt]
        assert (sample_bundle.read_bytes(), spt.read_bytes()) == original

    def test_translation_relays_out_sections(self, converter, sample_bundle):
        converter.externalize_file(sample_bundle)
        translate(
            sample_bundle.with_suffix(".csv"),
            L1="Good morning.\nNice weather.\nIsn't it?",
            N1="Ayano",
        )

        converter.internalize_file(sample_bundle.with_suffix(".meta"))

        lines = read_script_lines(sample_bundle)
        assert lines[2:6] == [
            "Ayano（０１２３）",
            "Good morning.",
            "Nice weather.",
            "Isn't it?",
        ]
        spt = sample_bundle.parent / f"{SCENE_ID}.spt"
        records = decode_records(spt.read_bytes())
        assert records[1].line_count == 4
        assert records[3].line_offset == 8
        assert records[4].line_offset == 9
        assert records[4].field_1c == 99

    def test_sections_committed_with_script(self, converter, sample_bundle):
        converter.externalize_file(sample_bundle)
        translate(sample_bundle.with_suffix(".csv"), L2="One.\nTwo.")

        result = converter.internalize_file(sample_bundle.with_suffix(".meta"))

        spt = sample_bundle.parent / f"{SCENE_ID}.spt"
        assert result.outputs == [sample_bundle, spt]
        assert decode_records(spt.read_bytes())[3].line_count == 2
        assert sorted(p.name for p in sample_bundle.parent.iterdir()) == [
            f"{SCENE_ID}.spt",
            "scene.csv",
            "scene.meta",
            "scene.txt",
        ]

    def test_missing_table(self, converter, sample_bundle):
        converter.externalize_file(sample_bundle)
        sample_bundle.with_suffix(".csv").unlink()

        with pytest.raises(MissingCompanionFileError) as excinfo:
            converter.internalize_file(sample_bundle.with_suffix(".meta"))
        assert excinfo.value.details["expected_path"].endswith("scene.csv")

    def test_missing_meta(self, converter, sample_bundle):
        converter.externalize_file(sample_bundle)
        sample_bundle.with_suffix(".meta").unlink()

        with pytest.raises(MissingCompanionFileError):
            converter.internalize_file(sample_bundle.with_suffix(".csv"))

    def test_untranslatable_text_writes_nothing(self, converter, sample_bundle):
        converter.externalize_file(sample_bundle)
        sample_bundle.unlink()
        translate(sample_bundle.with_suffix(".csv"), L3="emoji 😀")

        with pytest.raises(TenkiConvError):
            converter.internalize_file(sample_bundle.with_suffix(".csv"))
        assert not sample_bundle.exists()

    def test_dry_run(self, sample_bundle):
        ScriptConverter(TenkiConvSettings(_env_file=None)).externalize_file(
            sample_bundle
        )
        sample_bundle.unlink()
        settings = TenkiConvSettings(_env_file=None, dry_run=True)

        result = ScriptConverter(settings).internalize_file(
            sample_bundle.with_suffix(".meta")
        )

        assert result.success
        assert not sample_bundle.exists()

    def test_round_trip_with_configured_table_encoding(self, sample_bundle):
        converter = ScriptConverter(
            TenkiConvSettings(_env_file=None, table_encoding="cp932")
        )
        table_path = sample_bundle.with_suffix(".csv")
        assert converter.convert(sample_bundle).success

        table = read_table(table_path, "cp932")
        assert table.get("@L2")[0] == "風が吹いている。"
        table.put("@L2", "風が吹いている。", "風が止んだ。")
        table_path.write_bytes(table.encode("cp932"))

        result = converter.convert(table_path)

        assert result.success, result.message
        assert read_script_lines(sample_bundle)[7] == "風が止んだ。"


class TestBatchConversion:
    """Test per-file error handling across a batch."""

    def test_unknown_extension_is_skipped(self, converter, tmp_path):
        result = converter.convert(tmp_path / "notes.md")
        assert result.skipped
        assert not result.success
        assert result.error is None

    def test_failure_is_captured(self, converter, tmp_path):
        result = converter.convert(tmp_path / "missing.meta")

        assert not result.success
        assert isinstance(result.error, MissingCompanionFileError)
        assert result.to_dict()["error_type"] == "MissingCompanionFileError"
        assert result.hint is not None

    def test_unexpected_error_is_captured(self, converter, sample_bundle):
        with patch(
            "tenkiconv.api.convert.externalize", side_effect=RuntimeError("boom")
        ):
            result = converter.convert(sample_bundle)

        assert not result.success
        assert result.message == "boom"
        assert result.hint is None

    def test_batch_continues_after_failure(self, converter, sample_bundle, tmp_path):
        batch = converter.convert_many(
            [tmp_path / "missing.txt", sample_bundle, tmp_path / "notes.md"]
        )

        assert [r.success for r in batch.results] == [False, True, False]
        assert (batch.succeeded, batch.failed, batch.skipped) == (1, 1, 1)
        assert sample_bundle.with_suffix(".meta").exists()
        assert batch.duration >= 0

    def test_bundle_internalized_once(self, converter, sample_bundle):
        converter.externalize_file(sample_bundle)

        batch = converter.convert_many(
            [sample_bundle.with_suffix(".meta"), sample_bundle.with_suffix(".csv")]
        )

        assert batch.succeeded == 1
        assert batch.skipped == 1
        assert "already" in batch.results[1].reason


class TestCheckFile:
    """Test read-only validation of scripts."""

    def test_valid_script(self, converter, sample_bundle):
        assert converter.check_file(sample_bundle).is_valid

    def test_strict_flag(self, converter, sample_bundle):
        records = [Record(*r.as_tuple()) for r in SAMPLE_RECORDS]
        records[4].line_offset = 0
        write_section(sample_bundle.parent, SCENE_ID, records)

        assert converter.check_file(sample_bundle).is_valid
        assert not converter.check_file(sample_bundle, strict=True).is_valid

    def test_externalized_script_is_checkable(self, converter, sample_bundle):
        converter.externalize_file(sample_bundle)
        result = converter.check_file(sample_bundle.with_suffix(".meta"), strict=True)
        assert result.is_valid

    def test_sample_lines_parse(self, converter, sample_bundle):
        assert read_script_lines(sample_bundle) == SAMPLE_LINES
