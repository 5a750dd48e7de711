"""Tests for the smn command line."""

import json
from unittest.mock import MagicMock, patch

import pytest

from smn._db import CONNECT_TIMEOUT, connection_params
from smn.cli import build_parser
from smn.commands.apply_schema import SCHEMA_PATH, split_statements


def run_cli(*argv):
    args = build_parser().parse_args(list(argv))
    args.func(args)


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("STYLEMINER_DATA_DIR", str(tmp_path / "data"))
    return tmp_path / "data"


@pytest.fixture
def extracted(data_dir, make_rule):
    """Two extraction results with one duplicated rule."""
    out = data_dir / "extracted"
    out.mkdir(parents=True)
    shared = dict(name="Avoid passive voice", description="Prefer active constructions in news copy.")
    files = {
        "el-pais": ("El País", [make_rule("EP1", publication="El País", **shared), make_rule("EP2", name="Cifras")]),
        "on-writing-well": ("On Writing Well", [make_rule("OW1", publication="On Writing Well", **shared)]),
    }
    for document_id, (name, rules) in files.items():
        (out / f"{document_id}-toc-guided-rules.json").write_text(json.dumps({
            "source": {"name": name, "documentId": document_id},
            "allRules": [r.to_dict() for r in rules],
        }), encoding="utf-8")
    return out


class TestParser:
    """Tests for argument parsing."""

    def test_requires_command(self):
        """Running without a command is an error."""
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_extract_arguments(self):
        """Extract options are parsed."""
        args = build_parser().parse_args(["extract", "el-pais", "--no-cache", "--delay", "1.5"])
        assert args.documents == ["el-pais"]
        assert args.no_cache is True
        assert args.delay == 1.5

    def test_cache_flags_exclusive(self):
        """--clear and --stale cannot be combined."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["cache", "--clear", "--stale"])


class TestMergeCommand:
    """Tests for smn merge."""

    def test_merges_default_inputs(self, data_dir, extracted):
        """Default inputs are merged, deduplicated and validated."""
        run_cli("merge")

        output = json.loads((data_dir / "rules.json").read_text(encoding="utf-8"))
        ids = [r["id"] for r in output["rules"]]
        assert sorted(ids) == ["EP1", "EP2"]
        assert output["validation_result"]["isValid"] is True
        assert len(output["sources"]) == 2

    def test_source_priority_option(self, data_dir, extracted):
        """--source-priority decides which duplicate is kept."""
        run_cli("merge", "--source-priority", "On Writing Well,El País", "--out", str(data_dir / "x.json"))

        output = json.loads((data_dir / "x.json").read_text(encoding="utf-8"))
        assert "OW1" in [r["id"] for r in output["rules"]]

    def test_no_dedup(self, data_dir, extracted):
        """--no-dedup keeps every rule."""
        run_cli("merge", "--no-dedup")
        output = json.loads((data_dir / "rules.json").read_text(encoding="utf-8"))
        assert output["total_rules"] == 3

    def test_no_inputs_exits(self, data_dir):
        """Missing inputs end with exit code 1."""
        with pytest.raises(SystemExit) as exc_info:
            run_cli("merge")
        assert exc_info.value.code == 1

    def test_text_type_from_toc_config(self, data_dir, extracted):
        """A single El País input picks up textType "news" from its ToC configuration."""
        run_cli("merge", str(extracted / "el-pais-toc-guided-rules.json"))

        output = json.loads((data_dir / "rules.json").read_text(encoding="utf-8"))
        assert output["text_type"]["type"] == "news"
        assert "LEAD_STRUCTURE" in output["text_type"]["essential"]["missing"]

    def test_mixed_text_types_add_no_block(self, data_dir, extracted):
        """Sources with different ToC text types leave the text_type block out."""
        run_cli("merge")
        output = json.loads((data_dir / "rules.json").read_text(encoding="utf-8"))
        assert "text_type" not in output

    def test_text_type_reorder(self, data_dir, extracted):
        """--reorder renumbers priorities from 1 in the written rules."""
        run_cli("merge", "--text-type", "news", "--reorder")

        output = json.loads((data_dir / "rules.json").read_text(encoding="utf-8"))
        assert [r["priority"] for r in output["rules"]] == [1, 2]
        assert output["text_type"]["type"] == "news"

    def test_reorder_without_profile_keeps_priorities(self, data_dir, extracted):
        """--reorder is skipped for text types without a profile."""
        run_cli("merge", "--text-type", "academic", "--reorder")

        output = json.loads((data_dir / "rules.json").read_text(encoding="utf-8"))
        assert [r["priority"] for r in output["rules"]] == [5, 5]
        assert output["text_type"]["essential"] is None

    def test_db_upsert_commits(self, data_dir, extracted):
        """--db upserts the merged rules, commits and closes."""
        conn = MagicMock()
        with patch("smn._db.get_connection", return_value=conn), \
             patch("llm_query.upsert_rules", return_value=2) as upsert:
            run_cli("merge", "--db")

        upsert.assert_called_once()
        conn.commit.assert_called_once()
        conn.close.assert_called_once()


class TestTocsCommand:
    """Tests for smn tocs."""

    def test_json_output(self, capsys):
        """--json prints every registered configuration."""
        run_cli("tocs", "--json")

        configs = json.loads(capsys.readouterr().out)
        by_id = {c["documentId"]: c for c in configs}
        assert {"el-pais", "escritura-transparente", "on-writing-well"} <= set(by_id)
        assert by_id["el-pais"]["extractionOptions"]["textType"] == "news"


class TestValidateCommand:
    """Tests for smn validate."""

    def test_valid_file(self, tmp_path, make_rule):
        """A valid rule array passes --strict."""
        path = tmp_path / "rules.json"
        path.write_text(json.dumps([make_rule("R1").to_dict()]), encoding="utf-8")
        run_cli("validate", str(path), "--strict")

    def test_strict_fails_on_errors(self, tmp_path, make_rule):
        """Duplicate ids fail --strict."""
        path = tmp_path / "rules.json"
        path.write_text(json.dumps({"rules": [make_rule("R1").to_dict()] * 2}), encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            run_cli("validate", str(path), "--strict")
        assert exc_info.value.code == 1

    def test_missing_file(self, tmp_path):
        """A missing rules file is an error."""
        with pytest.raises(SystemExit):
            run_cli("validate", str(tmp_path / "nope.json"))

    def test_malformed_rule_record_exits_cleanly(self, tmp_path):
        """A wrongly shaped rule record is reported, not raised as a traceback."""
        path = tmp_path / "rules.json"
        path.write_text(json.dumps([{"id": "b", "detection": "ai"}]), encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            run_cli("validate", str(path))
        assert exc_info.value.code == 1


class TestExtractCommand:
    """Tests for smn extract argument checks (no model calls)."""

    def test_requires_api_key(self, data_dir, monkeypatch):
        """Extraction without GEMINI_API_KEY exits with code 1."""
        monkeypatch.setenv("GEMINI_API_KEY", "")
        with pytest.raises(SystemExit) as exc_info:
            run_cli("extract", "el-pais")
        assert exc_info.value.code == 1

    def test_pdf_requires_single_document(self, data_dir):
        """--pdf is only allowed with a single document."""
        with pytest.raises(SystemExit):
            run_cli("extract", "el-pais", "on-writing-well", "--pdf", "x.pdf")

    def test_missing_pdf_reported_per_document(self, data_dir, tmp_path, monkeypatch):
        """A missing PDF fails its document and the run exits with code 1."""
        monkeypatch.setenv("GEMINI_API_KEY", "test-key")
        monkeypatch.setenv("STYLEMINER_ASSETS_DIR", str(tmp_path / "no-assets"))
        with patch("smn.commands.extract.gemini_rule_model") as model:
            with pytest.raises(SystemExit) as exc_info:
                run_cli("extract", "el-pais", "--no-cache")

        model.assert_called_once()
        assert exc_info.value.code == 1


class TestSplitStatements:
    """Tests for SQL statement splitting."""

    def test_dollar_quoted_block_is_one_statement(self):
        """A DO $$ ... $$ block is kept as one statement."""
        sql = (
            "DO $$ BEGIN\n"
            "    CREATE TYPE t AS ENUM ('a');\n"
            "EXCEPTION\n"
            "    WHEN duplicate_object THEN NULL;\n"
            "END $$;\n"
            "CREATE TABLE x (id int);\n"
        )
        stmts = split_statements(sql)
        assert len(stmts) == 2
        assert stmts[0].startswith("DO $$")
        assert stmts[1] == "CREATE TABLE x (id int);"

    def test_trailing_comment_ignored(self):
        """A trailing comment is not a statement."""
        assert split_statements("SELECT 1;\n-- koniec\n") == ["SELECT 1;"]

    def test_shipped_schema(self):
        """The shipped schema splits into statements including the style_rule table."""
        stmts = split_statements(SCHEMA_PATH.read_text(encoding="utf-8"))
        assert any("CREATE TABLE IF NOT EXISTS style_rule" in s for s in stmts)


class TestConnectionParams:
    """Tests for database connection settings."""

    def test_defaults(self):
        """Without variables the local container defaults are used."""
        assert connection_params({}) == {
            "host": "localhost",
            "port": 5433,
            "dbname": "styleminer",
            "user": "styleminer",
            "password": "styleminer",
            "connect_timeout": CONNECT_TIMEOUT,
        }

    def test_pg_variables(self):
        """PG* variables override the defaults."""
        params = connection_params({"PGHOST": "db", "PGPORT": "6543", "PGUSER": "ana"})
        assert params["host"] == "db"
        assert params["port"] == 6543
        assert params["user"] == "ana"
        assert params["dbname"] == "styleminer"

    def test_url_wins(self):
        """STYLEMINER_DATABASE_URL replaces the PG* parameters."""
        url = "postgresql://u:p@h:5432/rules"
        params = connection_params({"STYLEMINER_DATABASE_URL": url, "PGHOST": "db"})
        assert params == {"dsn": url, "connect_timeout": CONNECT_TIMEOUT}

    def test_bad_port(self):
        """A non-numeric PGPORT is a ValueError naming the variable."""
        with pytest.raises(ValueError, match="PGPORT"):
            connection_params({"PGPORT": "abc"})
