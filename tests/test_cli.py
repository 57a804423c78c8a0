"""Tests for the command line entry point."""

import json

import pytest

from pipelines.lead_quality.cli import build_request, load_contacts_file, main, parse_args

from fixtures.sample_contacts import make_residential_contact

ENGINE_ENV_VARS = ("CALL_SUPPRESS_STATES", "LEAD_QUALITY_TIER", "LEAD_SOURCE", "LEAD_EXPORT_PATH")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENGINE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def contacts_file(tmp_path):
    path = tmp_path / "contacts.json"
    path.write_text(
        json.dumps([make_residential_contact(i) for i in range(3)]),
        encoding="utf-8",
    )
    return path


class TestParseArgs:
    """Tests for argument parsing."""

    def test_defaults(self):
        args = parse_args(["-r", "roof repair", "-z", "33101"])

        assert args.scope == "residential"
        assert args.use_case == "both"
        assert args.count == 200
        assert args.tier is None
        assert args.no_export is False

    def test_invalid_choice_exits(self):
        with pytest.raises(SystemExit):
            parse_args(["-r", "roof repair", "-z", "33101", "-t", "premium"])

    def test_build_request(self):
        args = parse_args([
            "-r", "roof repair", "-z", "33101,33130", "-s", "both", "-u", "call",
            "-n", "25", "-t", "hot", "--min-match-score", "2",
        ])

        assert build_request(args) == {
            "leadRequest": "roof repair",
            "zipCodes": "33101,33130",
            "leadScope": "both",
            "useCase": "call",
            "requestedCount": 25,
            "minMatchScore": 2,
            "qualityTier": "hot",
        }

    def test_optional_fields_omitted(self):
        request = build_request(parse_args(["-r", "roof repair", "-z", "33101"]))
        assert "minMatchScore" not in request
        assert "qualityTier" not in request


class TestLoadContactsFile:
    """Tests for contact file loading."""

    def test_list(self, contacts_file):
        assert len(load_contacts_file(str(contacts_file))) == 3

    def test_wrapped_object(self, tmp_path):
        path = tmp_path / "wrapped.json"
        path.write_text(json.dumps({"contacts": [{"FIRST_NAME": "A"}]}), encoding="utf-8")
        assert load_contacts_file(str(path)) == [{"FIRST_NAME": "A"}]

    def test_wrong_shape(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"leads": []}), encoding="utf-8")
        with pytest.raises(ValueError, match="must hold a list"):
            load_contacts_file(str(path))


class TestMain:
    """Tests for exit codes and export."""

    def test_delivered_exit_zero(self, contacts_file):
        code = main([
            "-r", "kitchen remodeling", "-z", "33101", "-u", "call", "-n", "3",
            "--contacts", str(contacts_file), "--no-export",
        ])
        assert code == 0

    def test_nothing_delivered_exit_one(self, tmp_path):
        path = tmp_path / "dnc.json"
        path.write_text(json.dumps([make_residential_contact(0, DNC="Y")]), encoding="utf-8")

        code = main([
            "-r", "kitchen remodeling", "-z", "33101", "-u", "call",
            "--contacts", str(path), "--no-export",
        ])

        assert code == 1

    def test_invalid_request_exit_two(self, contacts_file):
        code = main(["-r", "ab", "-z", "33101", "--contacts", str(contacts_file), "--no-export"])
        assert code == 2

    def test_bad_contacts_file_exit_two(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        code = main(["-r", "kitchen remodeling", "-z", "33101", "--contacts", str(path)])

        assert code == 2

    def test_missing_contacts_file_exit_two(self, tmp_path):
        code = main([
            "-r", "kitchen remodeling", "-z", "33101",
            "--contacts", str(tmp_path / "absent.json"),
        ])
        assert code == 2

    def test_invalid_configured_tier_exit_two(self, monkeypatch, contacts_file):
        monkeypatch.setenv("LEAD_QUALITY_TIER", "premium")
        code = main(["-r", "kitchen remodeling", "-z", "33101", "--contacts", str(contacts_file)])
        assert code == 2

    def test_export_to_output_dir(self, tmp_path, contacts_file):
        out_dir = tmp_path / "out"

        code = main([
            "-r", "kitchen remodeling", "-z", "33101", "-u", "call",
            "--contacts", str(contacts_file), "-o", str(out_dir),
        ])

        assert code == 0
        assert len(list(out_dir.glob("*.csv"))) == 1
        assert len(list(out_dir.glob("*.summary.json"))) == 1
