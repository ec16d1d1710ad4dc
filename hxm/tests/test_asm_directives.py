import logging
import textwrap

import pytest

from hxm import asm as hxm_asm
from hxm.errors import (
    CompilerError,
    InvalidMetadataEntry,
    InvalidOpcode,
    InvalidParameterCount,
    ValueFormatError,
)


def assemble_source(src: str, **overrides):
    text = textwrap.dedent(src).strip("\n")
    lines = [f"{line}\n" for line in text.splitlines()]
    return hxm_asm.assemble(lines, **overrides)


def test_metadata_sets_program_fields():
    program = assemble_source(
        """
        #TITLE: My Program
        #author:Jane
        #Version: 1.2.3
        #DESCRIPTION: time: 12:30
        #COPYRIGHT: (c) 2021
        """
    )
    assert program.title == "My Program"
    assert program.author == "Jane"
    assert program.version == "1.2.3"
    assert program.description == "time: 12:30"
    assert program.copyright == "(c) 2021"
    assert program.instructions == []


def test_metadata_keeps_inner_whitespace():
    program = assemble_source("#TITLE:   two  words")
    assert program.title == "two  words"


def test_metadata_keeps_trailing_whitespace():
    program = hxm_asm.assemble(["#TITLE: Demo // note", "#AUTHOR: me  \r\n", "  #VERSION:1.0"])
    assert program.title == "Demo "
    assert program.author == "me  "
    assert program.version == "1.0"


def test_unknown_metadata_key_reports_line():
    with pytest.raises(InvalidMetadataEntry, match=r'"NAME" is invalid\. \(line 1\)') as info:
        assemble_source(
            """
            #TITLE: ok
            #NAME: nope
            """
        )
    assert info.value.line == 1


def test_comments_and_blank_lines_are_skipped():
    program = assemble_source(
        """
        // header comment

        noop // trailing comment
            // indented comment
        var 3
        """
    )
    assert [inst.mnemonic for inst in program.instructions] == ["noop", "var"]


def test_instruction_arguments_follow_schema_order():
    program = assemble_source(
        """
        jmpequ 5, 7
        syscallret 1, 2
        changeacc 255
        noop
        """
    )
    jmpequ, syscallret, changeacc, noop = program.instructions
    assert jmpequ.opcode == 0x0F
    assert jmpequ.arguments == b"\x05\x00\x00\x00\x07\x00\x00\x00"
    assert syscallret.arguments == b"\x01\x00\x02\x00\x00\x00"
    assert changeacc.arguments == b"\xff"
    assert noop.arguments == b""


def test_instructions_keep_program_order():
    program = assemble_source(
        """
        var 0
        inc
        jmpl 0, 1
        end
        """
    )
    assert [inst.mnemonic for inst in program.instructions] == ["var", "inc", "jmpl", "end"]


def test_mnemonics_are_case_sensitive():
    with pytest.raises(InvalidOpcode, match='"NOOP" not recognized'):
        assemble_source("NOOP")


def test_unknown_mnemonic_cites_line_number():
    with pytest.raises(InvalidOpcode) as info:
        assemble_source(
            """
            #TITLE: demo
            noop
            FOOBAR 1
            noop
            """
        )
    assert info.value.line == 2
    assert str(info.value).endswith("(line 2)")


def test_unknown_mnemonic_skipped_in_tolerant_mode(caplog):
    caplog.set_level(logging.WARNING, logger="hxm.asm")
    program = assemble_source(
        """
        noop
        FOOBAR 1
        end
        """,
        ignore_errors=True,
    )
    assert [inst.mnemonic for inst in program.instructions] == ["noop", "end"]
    assert len(program.diagnostics) == 1
    assert isinstance(program.diagnostics[0], InvalidOpcode)
    assert program.diagnostics[0].line == 1
    assert "Ignoring error" in caplog.text


def test_parameter_count_mismatch():
    with pytest.raises(InvalidParameterCount, match="requires 2 arguments, while 1 were provided"):
        assemble_source("jmpequ 5")
    with pytest.raises(InvalidParameterCount):
        assemble_source("noop 1")
    with pytest.raises(InvalidParameterCount):
        assemble_source("var 1,")


def test_bad_literal_reports_line():
    with pytest.raises(ValueFormatError) as info:
        assemble_source(
            """
            var 1
            var abc
            """
        )
    assert info.value.line == 1
    assert isinstance(info.value, CompilerError)


def test_metadata_toggles_error_tolerance():
    program = assemble_source(
        """
        #IGNORE_COMPILER_ERRORS
        bogus
        var 1
        """
    )
    assert [inst.mnemonic for inst in program.instructions] == ["var"]
    assert [err.line for err in program.diagnostics] == [1]

    with pytest.raises(InvalidOpcode) as info:
        assemble_source(
            """
            #IgnoreCompilerErrors
            bogus
            #ENABLECOMPILERERRORS
            bogus
            """
        )
    assert info.value.line == 3


def test_tolerant_mode_also_skips_bad_metadata():
    program = assemble_source(
        """
        #NAME: nope
        #TITLE: kept
        """,
        ignore_errors=True,
    )
    assert program.title == "kept"
    assert isinstance(program.diagnostics[0], InvalidMetadataEntry)


def test_tolerance_does_not_leak_between_compilations():
    assemble_source(
        """
        #IGNORE_COMPILER_ERRORS
        bogus
        """
    )
    with pytest.raises(InvalidOpcode):
        assemble_source("bogus")


def test_custom_prefixes():
    config = hxm_asm.AssemblerConfig(comment_prefix=";", metadata_prefix="@")
    program = hxm_asm.assemble(
        [
            "; comment",
            "@TITLE: custom",
            "var 1 ; trailing",
            "#TITLE: not metadata",
        ],
        config,
        ignore_errors=True,
    )
    assert program.title == "custom"
    assert [inst.mnemonic for inst in program.instructions] == ["var"]
    assert isinstance(program.diagnostics[0], InvalidOpcode)


def test_empty_prefix_is_rejected():
    with pytest.raises(ValueError, match="comment_prefix"):
        hxm_asm.AssemblerConfig(comment_prefix="")


def test_split_instruction():
    assert hxm_asm.split_instruction("noop") == ("noop", [])
    assert hxm_asm.split_instruction("jmpequ  1 ,2 ") == ("jmpequ", ["1", "2"])
    assert hxm_asm.split_instruction("var\t9") == ("var", ["9"])


def test_strip_comment_keeps_column_zero_marker():
    assert hxm_asm.strip_comment("var 1 // x", "//") == "var 1 "
    assert hxm_asm.strip_comment("// x", "//") == "// x"
