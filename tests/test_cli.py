"""
Tests for regionquery/cli.py

Tests the CLI interface including:
- Argument parser structure
- run / explain / db info / config commands
- Exit codes for failures
"""
import pytest

from regionquery import cli
from regionquery.query import all_of, any_of, crop


class TestArgumentParser:
    """Test argument parser structure."""

    def test_run_requires_query(self):
        """run without --query should be rejected by argparse."""
        with pytest.raises(SystemExit) as exc:
            cli.build_parser().parse_args(["run"])
        assert exc.value.code == 2

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])

    def test_global_options(self):
        args = cli.build_parser().parse_args(
            ["--db", "points.db", "-v", "run", "-q", "q.json", "-o", "-", "--workers", "4"]
        )
        assert args.db == "points.db"
        assert args.verbose is True
        assert args.query == "q.json"
        assert args.output == "-"
        assert args.workers == 4
        assert args.func is cli.cmd_run


class TestRunCommand:
    """Test the run command end to end."""

    def test_writes_output_file(self, populated_db, query_file, crop_json, tmp_path):
        """Matching points are written one 'x y' line each, sorted by (y, x)."""
        query = query_file({"query": {"operator_and": [
            crop_json(0, 0, 5, 5), crop_json(3, 3, 10, 10),
        ]}})
        output = tmp_path / "result.txt"

        cli.main(["--db", str(populated_db.path), "run", "--query", str(query),
                  "--output", str(output)])

        assert output.read_text(encoding="utf-8") == "3 4\n5 5\n5 5\n"

    def test_default_output_file(self, populated_db, query_file, crop_json, tmp_path):
        """Without --output the result goes to output.txt in the working directory."""
        query = query_file({"query": crop_json(0, 0, 10, 10, category=1)})

        cli.main(["--db", str(populated_db.path), "run", "--query", str(query)])

        assert (tmp_path / "output.txt").read_text(encoding="utf-8") == "1 2\n3 4\n6 6\n"

    def test_stdout_output(self, populated_db, query_file, crop_json, capsys):
        query = query_file({"query": crop_json(0, 0, 10, 10, proper=True)})

        cli.main(["--db", str(populated_db.path), "run", "-q", str(query), "-o", "-"])

        assert capsys.readouterr().out.splitlines() == ["8 1", "1 2", "3 4", "5 5", "2 8"]

    def test_empty_result(self, populated_db, query_file, crop_json, tmp_path):
        query = query_file({"query": {"operator_or": []}})
        output = tmp_path / "empty.txt"

        cli.main(["--db", str(populated_db.path), "run", "-q", str(query), "-o", str(output)])

        assert output.read_text(encoding="utf-8") == ""

    def test_workers(self, populated_db, query_file, crop_json, tmp_path):
        query = query_file({"query": {"operator_or": [
            crop_json(0, 0, 5, 5), crop_json(3, 3, 10, 10),
        ]}})
        output = tmp_path / "result.txt"

        cli.main(["--db", str(populated_db.path), "run", "-q", str(query),
                  "-o", str(output), "--workers", "2"])

        assert output.read_text(encoding="utf-8").splitlines() == \
            ["1 2", "3 4", "5 5", "5 5", "6 6"]

    def test_malformed_query_exits_1(self, populated_db, query_file, tmp_path, capsys):
        """A malformed description exits with status 1 and writes nothing."""
        query = query_file({"query": {"operator_xor": []}})
        output = tmp_path / "result.txt"

        with pytest.raises(SystemExit) as exc:
            cli.main(["--db", str(populated_db.path), "run", "-q", str(query), "-o", str(output)])

        assert exc.value.code == 1
        assert not output.exists()
        assert "malformed_query" in capsys.readouterr().err

    def test_missing_store_exits_1(self, query_file, crop_json, tmp_path, capsys):
        """A mistyped --db path fails instead of creating an empty store."""
        query = query_file({"query": crop_json(0, 0, 10, 10)})
        missing = tmp_path / "typo.db"
        output = tmp_path / "result.txt"

        with pytest.raises(SystemExit) as exc:
            cli.main(["--db", str(missing), "run", "-q", str(query), "-o", str(output)])

        assert exc.value.code == 1
        assert not missing.exists()
        assert not output.exists()
        assert "store_unavailable" in capsys.readouterr().err

    def test_db_info_missing_store_exits_1(self, tmp_path):
        missing = tmp_path / "nowhere" / "points.db"

        with pytest.raises(SystemExit) as exc:
            cli.main(["--db", str(missing), "db", "info"])

        assert exc.value.code == 1
        assert not missing.parent.exists()

    def test_missing_query_file_exits_1(self, temp_db, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            cli.main(["--db", temp_db, "run", "-q", str(tmp_path / "missing.json")])

        assert exc.value.code == 1
        assert "io_failure" in capsys.readouterr().err


class TestOtherCommands:
    """Test explain, db info and config commands."""

    def test_explain(self, query_file, capsys):
        """explain prints the tree without needing a store."""
        from regionquery.query import to_description
        node = any_of(all_of(crop(0, 0, 1, 1), crop(2, 2, 3, 3)), crop(4, 4, 5, 5, category=7))
        query = query_file(to_description(node))

        cli.main(["explain", "-q", str(query)])

        out = capsys.readouterr().out
        assert "or" in out
        assert "and" in out
        assert out.count("crop") >= 3

    def test_db_info(self, populated_db, capsys):
        cli.main(["--db", str(populated_db.path), "db", "info"])

        out = capsys.readouterr().out
        assert "Points" in out
        assert "9" in out

    def test_config_show(self, capsys):
        cli.main(["config", "show"])

        out = capsys.readouterr().out
        assert "output_file" in out
        assert "max_workers" in out

    def test_config_init(self, tmp_path):
        target = tmp_path / "written.toml"

        cli.main(["config", "init", str(target)])

        assert target.exists()
        assert "database" in target.read_text(encoding="utf-8")

    def test_config_file_option(self, tmp_path, capsys):
        conf = tmp_path / "custom.toml"
        conf.write_text('output_file = "custom-out.txt"\n', encoding="utf-8")

        cli.main(["--config", str(conf), "config", "show"])

        assert "custom-out.txt" in capsys.readouterr().out
