"""Data models for TVGate."""

from tvgate.models.channel import ChannelDescriptor

__all__ = ["ChannelDescriptor"]
