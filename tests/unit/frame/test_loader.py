"""Tests for loading, reloading and unloading command modules from files."""

import sys
import textwrap

import pytest

from frame.commands import Command
from frame.core import loader
from frame.errors import RegistrationError

ECHO_SOURCE = '''
from frame.commands import Command


class EchoCommand(Command):
    def __init__(self, client):
        super().__init__(
            client,
            name="echo",
            group="util",
            member_name="echo",
            description="{description}",
        )


class _Helper:
    pass
'''


def write_command(directory, description="Repeats things."):
    path = directory / "util" / "echo.py"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(ECHO_SOURCE).format(description=description))
    return path


@pytest.fixture(autouse=True)
def clean_modules():
    yield
    for name in [name for name in sys.modules if name.startswith(loader.DYNAMIC_PREFIX)]:
        del sys.modules[name]


@pytest.fixture
def commands_dir(tmp_path):
    directory = tmp_path / "commands"
    write_command(directory)
    (directory / "_private.py").write_text("raise RuntimeError('never imported')\n")
    return directory


class TestDiscovery:
    """Test finding command modules."""

    def test_discover_modules(self, commands_dir):
        (commands_dir / "top.py").write_text("")

        found = loader.discover_modules(commands_dir)

        assert [path.name for path in found] == ["top.py", "echo.py"]

    def test_missing_directory(self, tmp_path):
        with pytest.raises(RegistrationError):
            loader.discover_modules(tmp_path / "nope")

    def test_module_name(self, commands_dir):
        path = commands_dir / "util" / "echo.py"

        assert loader.module_name_for(path, commands_dir) == "frame_dynamic.commands.util.echo"

    def test_extract_exports_only_own_public_classes(self, commands_dir):
        path = commands_dir / "util" / "echo.py"
        module = loader.load_module_from_path(path, loader.module_name_for(path, commands_dir))

        exports = loader.extract_exports(module, Command)

        assert [export.__name__ for export in exports] == ["EchoCommand"]

    def test_default_export_wins(self, tmp_path):
        path = tmp_path / "mod.py"
        path.write_text(textwrap.dedent(ECHO_SOURCE).format(description="x") + "\ndefault = [EchoCommand]\n")
        module = loader.load_module_from_path(path, "frame_dynamic.test.mod")

        assert loader.extract_exports(module, Command) == [module.EchoCommand]

    def test_failed_load_keeps_previous_module(self, tmp_path):
        path = tmp_path / "mod.py"
        path.write_text("VALUE = 1\n")
        first = loader.load_module_from_path(path, "frame_dynamic.test.mod")
        path.write_text("VALUE = (\n")

        with pytest.raises(SyntaxError):
            loader.load_module_from_path(path, "frame_dynamic.test.mod")

        assert sys.modules["frame_dynamic.test.mod"] is first


class TestRegistryLoading:
    """Test the registry operations built on the loader."""

    @pytest.fixture
    def registry(self, default_client):
        return default_client.registry

    def test_register_commands_in(self, registry, commands_dir):
        registry.register_commands_in(commands_dir)

        assert registry.commands["echo"].description == "Repeats things."
        assert registry.commands_path == commands_dir

    def test_reload_picks_up_changes(self, registry, commands_dir):
        registry.register_commands_in(commands_dir)
        old = registry.commands["echo"]
        old.set_enabled_in(5, False)
        write_command(commands_dir, "Repeats things, again.")

        old.reload()

        new = registry.commands["echo"]
        assert new is not old
        assert new.description == "Repeats things, again."
        assert not new.is_enabled_in(5)

    def test_failed_reload_keeps_old_command(self, registry, commands_dir):
        registry.register_commands_in(commands_dir)
        old = registry.commands["echo"]
        (commands_dir / "util" / "echo.py").write_text("class Broken(\n")

        with pytest.raises(SyntaxError):
            registry.reload_command(old)

        assert registry.commands["echo"] is old

    def test_unload_drops_module(self, registry, commands_dir):
        registry.register_commands_in(commands_dir)
        module_name = type(registry.commands["echo"]).__module__

        registry.commands["echo"].unload()

        assert "echo" not in registry.commands
        assert module_name not in sys.modules

    def test_load_command_from_path(self, registry, commands_dir):
        registry.commands_path = commands_dir

        loaded = registry.load_command(registry.resolve_command_path("util", "echo"))

        assert [command.name for command in loaded] == ["echo"]
        assert registry.commands["echo"] is loaded[0]

    def test_register_types_in(self, registry, tmp_path):
        types_dir = tmp_path / "types"
        types_dir.mkdir()
        (types_dir / "colour.py").write_text(
            textwrap.dedent(
                """
                from frame.types import ArgumentType


                class ColourType(ArgumentType):
                    id = "colour"

                    def validate(self, value, ctx, argument):
                        return value in ("red", "blue")

                    def parse(self, value, ctx, argument):
                        return value
                """
            )
        )

        registry.register_types_in(types_dir)

        assert "colour" in registry.types
