"""File-backed alert feeds."""

from carestock.infrastructure.feeds.yaml_feed import YamlFeedFile

__all__ = ["YamlFeedFile"]
