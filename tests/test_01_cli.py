"""Command-line tests, run in-process against a temporary working directory."""

import json
import logging

import pytest

from tsais.cli import USAGE, main, parse_args


@pytest.fixture
def project(write_tree, monkeypatch):
    root = write_tree(
        {
            "main.ts": 'import { double } from "./lib";\nconst x = double(1 + 2);\n',
            "lib.ts": "export function double(n: number) {\n  return n * 2;\n}\n",
        }
    )
    monkeypatch.chdir(root)
    return root


def test_default_output_path(project, capsys):
    assert main(["transpile", "main.ts"]) == 0
    out = (project / "dist" / "main.ais").read_text()
    assert out == "@double(n) {\n  return (n * 2)\n}\nlet x = double((1 + 2))\n"
    assert capsys.readouterr().err == ""


def test_explicit_output_path(project):
    assert main(["transpile", "main.ts", "-o", "out/bundle.ais"]) == 0
    assert (project / "out" / "bundle.ais").read_text().startswith("@double(n)")


def test_stdout_output(project, capsys):
    assert main(["transpile", "main.ts", "--output", "-"]) == 0
    assert capsys.readouterr().out.endswith("let x = double((1 + 2))\n")
    assert not (project / "dist").exists()


def test_ast_output(project, capsys):
    assert main(["transpile", "main.ts", "--ast", "-o", "-"]) == 0
    tree = json.loads(capsys.readouterr().out)
    assert [node["kind"] for node in tree] == ["Def", "Def"]
    assert tree[0]["dest"]["name"] == "double"
    assert tree[0]["expr"]["kind"] == "Fn"


def test_modules_mode(project, capsys):
    assert main(["transpile", "main.ts", "--mode", "modules", "-o", "-"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("let __gen_00001 = eval {\n")
    assert "let double = __gen_00001.double\n" in out


def test_root_option(write_tree, monkeypatch, capsys):
    root = write_tree(
        {
            "app/main.ts": 'import { one } from "shared/values";\nconst y = one;\n',
            "app/shared/values.ts": "export const one = 1;\n",
        }
    )
    monkeypatch.chdir(root)
    assert main(["transpile", "app/main.ts", "--root", "app", "-o", "-"]) == 0
    assert capsys.readouterr().out == "let one = 1\nlet y = one\n"


def test_conversion_error_is_reported(write_tree, monkeypatch, capsys):
    root = write_tree({"main.ts": "const a = 1;\nlet b;\n"})
    monkeypatch.chdir(root)
    assert main(["transpile", "main.ts"]) == 1
    err = capsys.readouterr().err
    assert err.startswith("error: ")
    assert "main.ts:2:1: error converting statement: variable declaration requires an initializer" in err
    assert not (root / "dist").exists()


def test_modules_mode_error_is_reported(write_tree, monkeypatch, capsys):
    root = write_tree({"main.ts": 'const a = 1;\nif ("s") { }\n'})
    monkeypatch.chdir(root)
    assert main(["transpile", "main.ts", "--mode", "modules"]) == 1
    err = capsys.readouterr().err
    assert "main.ts:2:5: condition must be boolean" in err


def test_missing_entry_is_reported(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main(["transpile", "nowhere.ts"]) == 1
    assert "cannot read file" in capsys.readouterr().err


def test_verbose_logs_progress(project, caplog):
    caplog.set_level(logging.DEBUG, logger="tsais")
    assert main(["transpile", "main.ts", "--verbose", "-o", "-"]) == 0
    assert any(r.name.startswith("tsais.") and r.levelno == logging.DEBUG for r in caplog.records)


@pytest.mark.parametrize(
    "args,message",
    [
        (["build", "main.ts"], "unknown command 'build'"),
        (["transpile"], "transpile requires an entry file"),
        (["transpile", "main.ts", "-o"], "-o requires an argument"),
        (["transpile", "main.ts", "--mode", "flat"], "unknown mode 'flat'"),
        (["transpile", "main.ts", "--fast"], "unknown flag '--fast'"),
        (["transpile", "main.ts", "other.ts"], "unexpected argument 'other.ts'"),
    ],
)
def test_usage_errors(args, message, capsys):
    with pytest.raises(SystemExit) as exc:
        parse_args(args)
    assert exc.value.code == 2
    assert message in capsys.readouterr().err


def test_no_arguments_prints_usage(capsys):
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 2
    assert capsys.readouterr().err == USAGE


def test_help(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--help"])
    assert exc.value.code == 0
    assert capsys.readouterr().out == USAGE


def test_parse_args_defaults():
    opts = parse_args(["transpile", "src/app.ts"])
    assert opts.entry == "src/app.ts"
    assert opts.output is None
    assert opts.root is None
    assert opts.mode == "bundle"
    assert not opts.ast
    assert not opts.verbose
