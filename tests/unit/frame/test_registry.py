"""Tests for command, group and type registration."""

from unittest.mock import MagicMock

import pytest

from frame.builtins import PingCommand
from frame.commands import Command, CommandGroup
from frame.errors import RegistrationError
from frame.types import ArgumentType


class EchoCommand(Command):
    def __init__(self, client):
        super().__init__(
            client,
            name="echo",
            aliases=["say"],
            group="util",
            member_name="echo",
            description="Repeats things.",
        )


class ShoutCommand(Command):
    def __init__(self, client, name="shout", aliases=None, member_name="shout", unknown=False):
        super().__init__(
            client,
            name=name,
            aliases=aliases,
            group="util",
            member_name=member_name,
            description="Repeats things loudly.",
            unknown=unknown,
        )


class ColourType(ArgumentType):
    id = "colour"

    def validate(self, value, ctx, argument):
        return value in ("red", "blue")

    def parse(self, value, ctx, argument):
        return value


@pytest.fixture
def registry(client):
    client.registry.register_group("util", "Utility")
    return client.registry


class TestGroupRegistration:
    """Test registering groups."""

    def test_register_by_id(self, registry):
        assert registry.groups["util"].name == "Utility"

    def test_register_many(self, registry, client):
        registry.register_groups(["mod", ("fun", "Fun"), {"id": "core", "guarded": True}, CommandGroup(client, "misc")])

        assert set(registry.groups) == {"util", "mod", "fun", "core", "misc"}
        assert registry.groups["fun"].name == "Fun"
        assert registry.groups["core"].guarded

    def test_register_many_requires_list(self, registry):
        with pytest.raises(TypeError):
            registry.register_groups("mod")

    def test_duplicate_group_is_skipped(self, registry):
        original = registry.groups["util"]

        registry.register_group("util", "Other name")

        assert registry.groups["util"] is original
        assert original.name == "Utility"

    def test_invalid_group_object(self, registry):
        with pytest.raises(RegistrationError):
            registry.register_group(42)

    def test_group_register_event(self, client):
        listener = MagicMock()
        listener.__name__ = "listener"
        client.event_system.add_listener("group_register", listener)

        client.registry.register_group("mod")

        listener.assert_called_once_with(client.registry.groups["mod"], client.registry)


class TestCommandRegistration:
    """Test registering commands."""

    def test_register_class(self, registry):
        registry.register_command(EchoCommand)

        command = registry.commands["echo"]
        assert isinstance(command, EchoCommand)
        assert command.group is registry.groups["util"]
        assert registry.groups["util"].commands["echo"] is command

    def test_register_instance(self, registry, client):
        command = EchoCommand(client)

        registry.register_command(command)

        assert registry.commands["echo"] is command

    def test_register_module_like_default_export(self, registry):
        module = MagicMock(spec=["default"])
        module.default = EchoCommand

        registry.register_command(module)

        assert "echo" in registry.commands

    def test_invalid_object(self, registry):
        with pytest.raises(RegistrationError):
            registry.register_command("echo")

    def test_duplicate_name(self, registry, client):
        registry.register_command(EchoCommand)
        echo = registry.commands["echo"]

        with pytest.raises(RegistrationError, match='name/alias "echo"'):
            registry.register_command(ShoutCommand(client, name="echo", member_name="other"))
        assert registry.commands == {"echo": echo}
        assert registry.groups["util"].commands == {"echo": echo}
        assert registry.unknown_command is None

    def test_name_clashing_with_alias(self, registry, client):
        registry.register_command(EchoCommand)
        echo = registry.commands["echo"]

        with pytest.raises(RegistrationError, match='name/alias "say"'):
            registry.register_command(ShoutCommand(client, name="say", unknown=True))
        assert registry.commands == {"echo": echo}
        assert registry.groups["util"].commands == {"echo": echo}
        assert registry.unknown_command is None

    def test_duplicate_member_name(self, registry, client):
        registry.register_command(EchoCommand)

        with pytest.raises(RegistrationError, match="member name"):
            registry.register_command(ShoutCommand(client, member_name="echo"))

    def test_unregistered_group(self, registry, client):
        command = EchoCommand(client)
        command.group_id = "gone"

        with pytest.raises(RegistrationError):
            registry.register_command(command)

    def test_second_unknown_command(self, registry, client):
        registry.register_command(ShoutCommand(client, name="fallback", member_name="fallback", unknown=True))

        with pytest.raises(RegistrationError, match="unknown command"):
            registry.register_command(ShoutCommand(client, unknown=True))
        assert registry.unknown_command.name == "fallback"

    def test_register_commands_ignoring_invalid(self, registry):
        registry.register_commands([EchoCommand, "junk", ShoutCommand], ignore_invalid=True)

        assert set(registry.commands) == {"echo", "shout"}

    def test_register_commands_rejects_invalid(self, registry):
        with pytest.raises(RegistrationError):
            registry.register_commands([EchoCommand, "junk"])

    def test_unregister(self, registry):
        registry.register_command(EchoCommand)
        command = registry.commands["echo"]

        registry.unregister_command(command)

        assert "echo" not in registry.commands
        assert "echo" not in registry.groups["util"].commands

    def test_reregister_keeps_state(self, registry, client):
        registry.register_command(EchoCommand)
        old = registry.commands["echo"]
        old.set_enabled_in(123, False)

        registry.reregister_command(EchoCommand, old)

        new = registry.commands["echo"]
        assert new is not old
        assert not new.is_enabled_in(123)

    def test_reregister_rejects_renamed_command(self, registry, client):
        registry.register_command(EchoCommand)

        with pytest.raises(RegistrationError):
            registry.reregister_command(ShoutCommand(client), registry.commands["echo"])

    def test_reregister_rejects_alias_of_another_command(self, registry, client):
        registry.register_command(EchoCommand)
        registry.register_command(ShoutCommand(client, name="ping", member_name="ping"))
        old = registry.commands["echo"]

        with pytest.raises(RegistrationError, match='name/alias "ping"'):
            registry.reregister_command(ShoutCommand(client, name="echo", aliases=["ping"], member_name="echo"), old)
        assert registry.commands["echo"] is old
        assert registry.groups["util"].commands["echo"] is old
        assert [command.name for command in registry.find_commands("ping")] == ["ping"]

    def test_reregister_keeps_own_aliases(self, registry, client):
        registry.register_command(EchoCommand)

        registry.reregister_command(EchoCommand, registry.commands["echo"])

        assert registry.find_commands("say", exact=True) == [registry.commands["echo"]]

    def test_reregister_clears_replaced_unknown_command(self, registry, client):
        registry.register_command(ShoutCommand(client, name="fallback", member_name="fallback", unknown=True))
        old = registry.unknown_command

        registry.reregister_command(ShoutCommand(client, name="fallback", member_name="fallback"), old)

        assert registry.unknown_command is None
        assert not registry.commands["fallback"].unknown

    def test_reregister_replaces_unknown_command(self, registry, client):
        registry.register_command(ShoutCommand(client, name="fallback", member_name="fallback", unknown=True))

        registry.reregister_command(
            ShoutCommand(client, name="fallback", member_name="fallback", unknown=True), registry.unknown_command
        )

        assert registry.unknown_command is registry.commands["fallback"]


class TestTypeRegistration:
    """Test registering argument types."""

    def test_register_type(self, registry):
        registry.register_type(ColourType)

        assert isinstance(registry.types["colour"], ColourType)

    def test_duplicate_type(self, registry):
        registry.register_type(ColourType)

        with pytest.raises(RegistrationError):
            registry.register_type(ColourType)

    def test_default_types_can_be_skipped(self, client):
        client.registry.register_default_types(default_emoji=False, custom_emoji=False)

        assert "default-emoji" not in client.registry.types
        assert "custom-emoji" not in client.registry.types
        assert "string" in client.registry.types


class TestDefaults:
    """Test the default registrations."""

    def test_register_defaults(self, default_client):
        registry = default_client.registry

        assert set(registry.groups) == {"commands", "util"}
        assert registry.groups["commands"].guarded
        assert {"help", "prefix", "ping", "unknown-command", "groups", "enable", "disable", "load", "unload", "reload"} == set(
            registry.commands
        )
        assert registry.unknown_command is registry.commands["unknown-command"]

    def test_default_commands_can_be_skipped(self, client):
        client.registry.register_default_types()
        client.registry.register_default_groups()

        client.registry.register_default_commands(help=False, command_state=False, unknown_command=False)

        assert set(client.registry.commands) == {"prefix", "ping"}


class TestLookup:
    """Test finding and resolving commands and groups."""

    def test_find_commands_partial(self, default_client):
        names = {command.name for command in default_client.registry.find_commands("oad")}

        assert names == {"load", "unload", "reload"}

    def test_find_commands_exact_match_wins(self, default_client):
        registry = default_client.registry

        assert registry.find_commands("LOAD") == [registry.commands["load"]]

    def test_find_commands_by_alias_and_path(self, default_client):
        registry = default_client.registry

        assert registry.find_commands("cmd-on", exact=True) == [registry.commands["enable"]]
        assert registry.find_commands("util:ping", exact=True) == [registry.commands["ping"]]

    def test_find_commands_usable_in_context(self, default_client, dm_context):
        usable = {command.name for command in default_client.registry.find_commands(ctx=dm_context)}

        assert "ping" in usable
        assert "load" not in usable

    def test_resolve_command(self, default_client):
        registry = default_client.registry
        ping = registry.commands["ping"]

        assert registry.resolve_command(ping) is ping
        assert registry.resolve_command("ping") is ping
        with pytest.raises(ValueError):
            registry.resolve_command("nope")

    def test_find_and_resolve_groups(self, default_client):
        registry = default_client.registry

        assert registry.find_groups("COMM") == [registry.groups["commands"]]
        assert registry.resolve_group("Utility") is registry.groups["util"]
        with pytest.raises(ValueError):
            registry.resolve_group("nope")

    def test_resolve_command_path(self, default_client, tmp_path):
        registry = default_client.registry

        with pytest.raises(RegistrationError):
            registry.resolve_command_path("util", "echo")

        registry.commands_path = tmp_path
        assert registry.resolve_command_path("util", "echo") == tmp_path / "util" / "echo.py"

    def test_builtin_ping_is_throttled(self, default_client):
        assert isinstance(default_client.registry.commands["ping"], PingCommand)
        assert default_client.registry.commands["ping"].throttling.usages == 5
