#!/usr/bin/env python3

import click
import pytest

from metamodel_to_code.cli_utils import reconstruct_command_line


def get_click_command():
    """Helper to get Click command for testing"""
    from metamodel_to_code.metamodel_to_code import metamodel_to_code

    return metamodel_to_code


class TestCliUtils:
    """Test cases for CLI utilities"""

    def test_reconstruct_command_line_without_context(self):
        """Test command reconstruction without active Click context (fallback)"""
        # There's no active Click context in tests, this should return fallback
        result = reconstruct_command_line(get_click_command())
        assert result == "metamodel_to_code"

    def test_reconstruct_command_line_with_context(self, tmp_path):
        """Non-default options are listed after the arguments"""
        schema = tmp_path / "metaModel.json"
        schema.write_text("{}")
        command = get_click_command()

        ctx = command.make_context(
            "metamodel_to_code", ["-l", "proto", "--types", "Range,Hover", "--no-resolve-deps", "--force", str(schema)]
        )
        with ctx:
            result = reconstruct_command_line(command)

        assert result == "metamodel_to_code metaModel.json --language proto --types Range,Hover --no-resolve-deps --force"

    def test_defaults_are_omitted(self, tmp_path):
        schema = tmp_path / "metaModel.json"
        schema.write_text("{}")
        command = get_click_command()

        with command.make_context("metamodel_to_code", [str(schema)]):
            assert reconstruct_command_line(command) == "metamodel_to_code metaModel.json"

    def test_plain_command(self):
        @click.command()
        @click.option("--name", default="x")
        def hello(name):
            pass

        with hello.make_context("hello", ["--name", "y"]):
            assert reconstruct_command_line(hello) == "metamodel_to_code --name y"


if __name__ == "__main__":
    pytest.main([__file__])
