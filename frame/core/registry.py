"""Command, group and argument type registration."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ..commands.base import Command
from ..commands.group import CommandGroup
from ..errors import RegistrationError
from ..types import DEFAULT_TYPES
from ..types.base import ArgumentType
from . import loader

if TYPE_CHECKING:
    from .client import FrameClient

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Holds every group, command and argument type known to a client."""

    def __init__(self, client: FrameClient) -> None:
        self.client = client
        self.commands: dict[str, Command] = {}
        self.groups: dict[str, CommandGroup] = {}
        self.types: dict[str, ArgumentType] = {}
        self.unknown_command: Command | None = None
        self.commands_path: Path | None = None

    def _emit(self, event_name: str, *args: Any) -> None:
        self.client.event_system.emit_nowait(event_name, *args)

    # Groups

    def register_group(self, group: CommandGroup | str, name: str | None = None, guarded: bool = False) -> CommandRegistry:
        if isinstance(group, str):
            group = CommandGroup(self.client, group, name, guarded)
        elif not isinstance(group, CommandGroup):
            raise RegistrationError(f"Invalid group object to register: {group!r}")

        if group.id in self.groups:
            logger.warning(f'A group with the ID "{group.id}" is already registered; skipping.')
            return self

        self.groups[group.id] = group
        self._emit("group_register", group, self)
        logger.debug(f"Registered group {group.id}")
        return self

    def register_groups(self, groups: list[CommandGroup | str | tuple | dict]) -> CommandRegistry:
        """Register groups given as objects, IDs, ``(id, name, guarded)`` tuples or dicts."""
        if not isinstance(groups, (list, tuple)):
            raise TypeError("Groups must be a list.")
        for group in groups:
            if isinstance(group, (list, tuple)):
                self.register_group(*group)
            elif isinstance(group, dict):
                self.register_group(group["id"], group.get("name"), group.get("guarded", False))
            else:
                self.register_group(group)
        return self

    # Commands

    def register_command(self, command: Any) -> CommandRegistry:
        command = loader.resolve_export(self.client, command, Command, "command")

        self._check_names(command)

        group = self.groups.get(command.group_id)
        if group is None:
            raise RegistrationError(f'Group "{command.group_id}" is not registered.')
        if any(existing.member_name == command.member_name for existing in group.commands.values()):
            raise RegistrationError(
                f'A command with the member name "{command.member_name}" is already registered in {group.id}'
            )
        if command.unknown and self.unknown_command is not None:
            raise RegistrationError("An unknown command is already registered.")

        command.group = group
        group.commands[command.name] = command
        self.commands[command.name] = command
        if command.unknown:
            self.unknown_command = command

        self._emit("command_register", command, self)
        logger.debug(f"Registered command {group.id}:{command.member_name}")
        return self

    def _check_names(self, command: Command, replacing: Command | None = None) -> None:
        others = [existing for existing in self.commands.values() if existing is not replacing]
        for name in (command.name, *command.aliases):
            if any(name == existing.name or name in existing.aliases for existing in others):
                raise RegistrationError(f'A command with the name/alias "{name}" is already registered.')

    def register_commands(self, commands: Iterable[Any], ignore_invalid: bool = False) -> CommandRegistry:
        for command in commands:
            if ignore_invalid and not loader.is_export(command, Command):
                logger.warning(f"Attempting to register an invalid command object: {command!r}; skipping.")
                continue
            self.register_command(command)
        return self

    def register_commands_in(self, directory: str | Path) -> CommandRegistry:
        """Load and register every command module under a directory.

        Modules sit either directly in the directory or in one subdirectory
        per group.
        """
        self.commands_path = Path(directory)
        return self.register_commands(loader.load_exports_in(directory, Command), ignore_invalid=True)

    def reregister_command(self, command: Any, old_command: Command) -> None:
        command = loader.resolve_export(self.client, command, Command, "command")
        if command.name != old_command.name:
            raise RegistrationError("Command name cannot change.")
        if command.group_id != old_command.group_id:
            raise RegistrationError("Command group cannot change.")
        if command.unknown and self.unknown_command is not old_command:
            raise RegistrationError("An unknown command is already registered.")
        self._check_names(command, replacing=old_command)

        old_command.clear_throttles()
        command.group = self.resolve_group(command.group_id)
        command._global_enabled = old_command._global_enabled
        command._guild_enabled = dict(old_command._guild_enabled)
        command.group.commands[command.name] = command
        self.commands[command.name] = command
        if command.unknown:
            self.unknown_command = command
        elif self.unknown_command is old_command:
            self.unknown_command = None

        self._emit("command_reregister", command, old_command)
        logger.debug(f"Reregistered command {command.group_id}:{command.member_name}")

    def unregister_command(self, command: Command) -> None:
        self.commands.pop(command.name, None)
        if command.group is not None:
            command.group.commands.pop(command.name, None)
        if self.unknown_command is command:
            self.unknown_command = None
        command.clear_throttles()

        self._emit("command_unregister", command)
        logger.debug(f"Unregistered command {command.group_id}:{command.member_name}")

    def reload_command(self, command: Command) -> None:
        """Re-import the module defining a command and swap in its new version.

        If importing fails the old command stays registered and the error
        propagates.
        """
        module = loader.reload_module(type(command).__module__)
        exports = [
            loader.resolve_export(self.client, export, Command, "command")
            for export in loader.extract_exports(module, Command)
        ]
        replacement = next((new for new in exports if new.name == command.name), None)
        if replacement is None:
            raise RegistrationError(f"Module {module.__name__} no longer exports the {command.name} command.")
        self.reregister_command(replacement, command)

    def unload_command(self, command: Command) -> None:
        self.unregister_command(command)
        module_name = type(command).__module__
        if not any(type(other).__module__ == module_name for other in self.commands.values()):
            loader.unload_module(module_name)

    def load_command(self, path: str | Path) -> list[Command]:
        """Load a command module from a file path and register its commands."""
        path = Path(path)
        root = self.commands_path if self.commands_path and path.is_relative_to(self.commands_path) else path.parent
        module = loader.load_module_from_path(path, loader.module_name_for(path, root))
        commands = [
            loader.resolve_export(self.client, export, Command, "command")
            for export in loader.extract_exports(module, Command)
        ]
        for command in commands:
            self.register_command(command)
        return commands

    # Types

    def register_type(self, argument_type: Any) -> CommandRegistry:
        argument_type = loader.resolve_export(self.client, argument_type, ArgumentType, "type")
        if argument_type.id in self.types:
            raise RegistrationError(f'An argument type with the ID "{argument_type.id}" is already registered.')

        self.types[argument_type.id] = argument_type
        self._emit("type_register", argument_type, self)
        logger.debug(f"Registered argument type {argument_type.id}")
        return self

    def register_types(self, types: Iterable[Any], ignore_invalid: bool = False) -> CommandRegistry:
        for argument_type in types:
            if ignore_invalid and not loader.is_export(argument_type, ArgumentType):
                logger.warning(f"Attempting to register an invalid argument type object: {argument_type!r}; skipping.")
                continue
            self.register_type(argument_type)
        return self

    def register_types_in(self, directory: str | Path) -> CommandRegistry:
        return self.register_types(loader.load_exports_in(directory, ArgumentType), ignore_invalid=True)

    # Defaults

    def register_defaults(self) -> CommandRegistry:
        self.register_default_types()
        self.register_default_groups()
        self.register_default_commands()
        return self

    def register_default_groups(self) -> CommandRegistry:
        return self.register_groups([("commands", "Commands", True), ("util", "Utility")])

    def register_default_types(self, **toggles: bool) -> CommandRegistry:
        """Register the built-in argument types.

        Pass ``<type_id>=False`` (dashes as underscores) to skip one, e.g.
        ``register_default_types(default_emoji=False)``.
        """
        for type_id, argument_type in DEFAULT_TYPES.items():
            if toggles.get(type_id.replace("-", "_"), True):
                self.register_type(argument_type)
        return self

    def register_default_commands(
        self,
        help: bool = True,
        prefix: bool = True,
        ping: bool = True,
        unknown_command: bool = True,
        command_state: bool = True,
    ) -> CommandRegistry:
        """Register the built-in commands. ``command_state`` covers groups/enable/disable/load/unload/reload."""
        from .. import builtins

        if help:
            self.register_command(builtins.HelpCommand)
        if prefix:
            self.register_command(builtins.PrefixCommand)
        if ping:
            self.register_command(builtins.PingCommand)
        if unknown_command:
            self.register_command(builtins.UnknownCommand)
        if command_state:
            self.register_commands(
                [
                    builtins.ListGroupsCommand,
                    builtins.EnableCommand,
                    builtins.DisableCommand,
                    builtins.LoadCommand,
                    builtins.UnloadCommand,
                    builtins.ReloadCommand,
                ]
            )
        return self

    # Lookup

    def find_groups(self, search: str | None = None, exact: bool = False) -> list[CommandGroup]:
        """Find groups by ID or name. An exact match among partial matches wins."""
        if not search:
            return list(self.groups.values())

        search = search.lower()
        if exact:
            return [g for g in self.groups.values() if g.id == search or g.name.lower() == search]

        matched = [g for g in self.groups.values() if search in g.id or search in g.name.lower()]
        for group in matched:
            if group.id == search or group.name.lower() == search:
                return [group]
        return matched

    def resolve_group(self, group: CommandGroup | str) -> CommandGroup:
        if isinstance(group, CommandGroup):
            return group
        if isinstance(group, str):
            groups = self.find_groups(group, exact=True)
            if len(groups) == 1:
                return groups[0]
        raise ValueError("Unable to resolve group.")

    def find_commands(self, search: str | None = None, exact: bool = False, ctx: Any = None) -> list[Command]:
        """Find commands by name, alias or ``group:member`` path.

        Without a search string every command is returned, filtered to the
        usable ones when a context is given.
        """
        if not search:
            if ctx is not None:
                return [c for c in self.commands.values() if c.is_usable(ctx)]
            return list(self.commands.values())

        search = search.lower()
        if exact:
            return [
                c
                for c in self.commands.values()
                if c.name == search or search in c.aliases or f"{c.group_id}:{c.member_name}" == search
            ]

        matched = [
            c
            for c in self.commands.values()
            if search in c.name
            or f"{c.group_id}:{c.member_name}" == search
            or any(search in alias for alias in c.aliases)
        ]
        for command in matched:
            if command.name == search or search in command.aliases:
                return [command]
        return matched

    def resolve_command(self, command: Command | str) -> Command:
        if isinstance(command, Command):
            return command
        if isinstance(command, str):
            commands = self.find_commands(command, exact=True)
            if len(commands) == 1:
                return commands[0]
        raise ValueError("Unable to resolve command.")

    def resolve_command_path(self, group: str, member_name: str) -> Path:
        if self.commands_path is None:
            raise RegistrationError("No commands directory has been registered.")
        return self.commands_path / group / f"{member_name}.py"
