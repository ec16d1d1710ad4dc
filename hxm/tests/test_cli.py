import textwrap

import pytest

from hxm import cli as hxm_cli
from hxm import image as hxm_image


def write_source(tmp_path, src: str):
    path = tmp_path / "prog.hxmasm"
    path.write_text(textwrap.dedent(src).lstrip("\n"), encoding="utf-8")
    return path


def test_cli_writes_image(tmp_path, capsys):
    src = write_source(
        tmp_path,
        """
        #TITLE: cli
        #AUTHOR: me
        var 1
        end
        """,
    )
    out = tmp_path / "prog.hxm"
    assert hxm_cli.main(["-i", str(src), "-o", str(out)]) == 0
    program = hxm_image.load_image(out.read_bytes())
    assert program.title == "cli"
    assert [inst.mnemonic for inst in program.instructions] == ["var", "end"]
    assert f"Wrote {out} (2 instructions" in capsys.readouterr().out


def test_cli_reports_error_with_line(tmp_path, capsys):
    src = write_source(
        tmp_path,
        """
        noop
        FOOBAR 1
        """,
    )
    out = tmp_path / "prog.hxm"
    assert hxm_cli.main(["-i", str(src), "-o", str(out)]) == 1
    stdout = capsys.readouterr().out
    assert stdout.startswith('error: Op-code "FOOBAR" not recognized.')
    assert "(line 1)" in stdout
    assert not out.exists()


def test_cli_ignore_errors(tmp_path):
    src = write_source(
        tmp_path,
        """
        noop
        FOOBAR 1
        end
        """,
    )
    out = tmp_path / "prog.hxm"
    assert hxm_cli.main(["-i", str(src), "-o", str(out), "--ignore-errors"]) == 0
    program = hxm_image.load_image(out.read_bytes())
    assert [inst.mnemonic for inst in program.instructions] == ["noop", "end"]


def test_cli_custom_prefixes(tmp_path):
    src = write_source(
        tmp_path,
        """
        ; comment
        @TITLE: prefixed
        noop ; trailing
        """,
    )
    out = tmp_path / "prog.hxm"
    assert hxm_cli.main(["-i", str(src), "-o", str(out), "-c", ";", "-m", "@"]) == 0
    assert hxm_image.load_image(out.read_bytes()).title == "prefixed"


def test_cli_fix_version_field(tmp_path):
    src = write_source(
        tmp_path,
        """
        #AUTHOR: me
        #VERSION: 2.0
        """,
    )
    out = tmp_path / "prog.hxm"
    assert hxm_cli.main(["-i", str(src), "-o", str(out), "--fix-version-field"]) == 0
    program = hxm_image.load_image(out.read_bytes(), legacy_version_field=False)
    assert program.version == "2.0"


def test_cli_missing_input(tmp_path, capsys):
    out = tmp_path / "prog.hxm"
    assert hxm_cli.main(["-i", str(tmp_path / "missing.hxmasm"), "-o", str(out)]) == 1
    assert "cannot read" in capsys.readouterr().out


def test_cli_rejects_empty_prefix(tmp_path):
    src = write_source(tmp_path, "noop\n")
    with pytest.raises(SystemExit) as info:
        hxm_cli.main(["-i", str(src), "-o", str(tmp_path / "prog.hxm"), "-c", ""])
    assert info.value.code == 2


def test_cli_requires_input_and_output():
    with pytest.raises(SystemExit):
        hxm_cli.main([])
