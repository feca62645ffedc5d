"""Built-in argument types."""

from .base import ArgumentType, UnionArgumentType
from .entities import (
    CategoryChannelArgumentType,
    ChannelArgumentType,
    CustomEmojiArgumentType,
    DefaultEmojiArgumentType,
    MemberArgumentType,
    MessageArgumentType,
    RoleArgumentType,
    TextChannelArgumentType,
    UserArgumentType,
    VoiceChannelArgumentType,
)
from .primitives import BooleanArgumentType, FloatArgumentType, IntegerArgumentType, StringArgumentType
from .references import CommandReferenceType, GroupReferenceType

DEFAULT_TYPES: dict[str, type[ArgumentType]] = {
    cls.id: cls
    for cls in (
        StringArgumentType,
        IntegerArgumentType,
        FloatArgumentType,
        BooleanArgumentType,
        UserArgumentType,
        MemberArgumentType,
        RoleArgumentType,
        ChannelArgumentType,
        TextChannelArgumentType,
        VoiceChannelArgumentType,
        CategoryChannelArgumentType,
        MessageArgumentType,
        CustomEmojiArgumentType,
        DefaultEmojiArgumentType,
        CommandReferenceType,
        GroupReferenceType,
    )
}

__all__ = [
    "ArgumentType",
    "UnionArgumentType",
    "DEFAULT_TYPES",
    "StringArgumentType",
    "IntegerArgumentType",
    "FloatArgumentType",
    "BooleanArgumentType",
    "UserArgumentType",
    "MemberArgumentType",
    "RoleArgumentType",
    "ChannelArgumentType",
    "TextChannelArgumentType",
    "VoiceChannelArgumentType",
    "CategoryChannelArgumentType",
    "MessageArgumentType",
    "CustomEmojiArgumentType",
    "DefaultEmojiArgumentType",
    "CommandReferenceType",
    "GroupReferenceType",
]
