"""Tests for the check command."""

from tenkiconv.parser.models import Record, RecordType
from tests.script_builders import SAMPLE_RECORDS, SCENE_ID, copy_records, write_section


def write_mismatched_section(bundle):
    records = copy_records(SAMPLE_RECORDS)
    records[2] = Record(RecordType.TEXT)
    write_section(bundle.parent, SCENE_ID, records)


class TestCheckCommand:
    """Test validating scripts from the command line."""

    def test_valid_script(self, cli_invoke, sample_bundle):
        result = cli_invoke("check", sample_bundle)
        result.assert_success().assert_contains("scene.txt: no violations")

    def test_violations_table(self, cli_invoke, sample_bundle):
        write_mismatched_section(sample_bundle)

        result = cli_invoke("check", sample_bundle)

        result.assert_failure(exit_code=1).assert_contains(
            "scene.txt: 1 violation", "Violations", "structural_mismatch", SCENE_ID
        )

    def test_strict_option(self, cli_invoke, sample_bundle):
        records = copy_records(SAMPLE_RECORDS)
        records[3].line_offset = 0
        write_section(sample_bundle.parent, SCENE_ID, records)

        cli_invoke("check", sample_bundle).assert_success()
        cli_invoke("check", "--strict", sample_bundle).assert_failure(
            exit_code=1
        ).assert_contains("line_offset")

    def test_unreadable_script(self, cli_invoke, sample_bundle):
        (sample_bundle.parent / f"{SCENE_ID}.spt").unlink()

        result = cli_invoke("check", sample_bundle)

        result.assert_failure(exit_code=1).assert_contains(
            "Missing section file", "Place a01_02.spt next to the script file."
        )

    def test_wrong_extension(self, cli_invoke, tmp_path):
        table = tmp_path / "scene.csv"
        table.write_text("ID\n", encoding="utf-8")

        result = cli_invoke("check", table)

        result.assert_failure(exit_code=1).assert_contains("Invalid file extension")

    def test_json_output(self, cli_invoke, sample_bundle):
        write_mismatched_section(sample_bundle)

        result = cli_invoke("check", "--json", sample_bundle)

        result.assert_failure(exit_code=1)
        data = result.parse_json()
        assert data["valid"] is False
        [report] = data["files"]
        assert report["name"] == "scene.txt"
        assert report["violations"][0]["kind"] == "structural_mismatch"
        assert report["violations"][0]["index"] == 2
