"""Tests for the declient command line."""

import pytest

from declient.cli import build_parser, main, resolve_contract
from sample_contracts import IUserService


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("DECLIENT_OUTPUT_SOURCE_FILES", raising=False)


class TestResolveContract:
    def test_colon_form(self):
        assert resolve_contract("sample_contracts:IUserService") is IUserService

    def test_dotted_form(self):
        assert resolve_contract("sample_contracts.IUserService") is IUserService

    def test_invalid_reference(self):
        with pytest.raises(ValueError):
            resolve_contract("IUserService")


class TestParser:
    def test_flags(self):
        args = build_parser().parse_args(
            ["generate", "m:C", "--namespace", "ns", "--no-sealed", "--write", "-o", "out", "-v"]
        )
        assert args.contracts == ["m:C"]
        assert args.namespace == "ns"
        assert args.sealed is False
        assert args.write is True
        assert args.out == "out"
        assert args.verbose is True

    def test_tristate_defaults(self):
        args = build_parser().parse_args(["generate", "m:C"])
        assert args.sealed is None
        assert args.write is None


class TestMain:
    def test_prints_generated_name(self, capsys):
        assert main(["generate", "sample_contracts:IUserService"]) == 0
        assert capsys.readouterr().out.strip() == "declient.generated.sample_contractsIUserService"

    def test_writes_sources(self, tmp_path):
        out = tmp_path / "gen"
        code = main(["generate", "sample_contracts:IUserService", "--write", "--out", str(out)])
        assert code == 0
        assert (out / "sample_contractsIUserService.py").exists()

    def test_compile_error_exits_one(self, capsys):
        code = main(["generate", "sample_contracts:ConflictingReturnService"])
        assert code == 1
        err = capsys.readouterr().err
        assert "DCL002" in err
        assert "sample_contracts.ConflictingReturnService.token" in err

    def test_validation_error_exits_one(self, capsys):
        assert main(["generate", "sample_contracts:GenericService"]) == 1
        assert "DCL001" in capsys.readouterr().err

    def test_unknown_contract(self, capsys):
        assert main(["generate", "sample_contracts:Nope"]) == 1
        assert "cannot load" in capsys.readouterr().err

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 2
        assert "generate" in capsys.readouterr().out
